# eventstager/models.py
from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

# attribute name -> key used in the store file
WIRE_KEYS = {
    "id": "id",
    "title": "title",
    "category": "category",
    "start_date": "startDate",
    "end_date": "endDate",
    "location": "location",
    "description": "description",
    "source": "source",
    "created_at": "createdAt",
}


@dataclass(frozen=True)
class Event:
    id: str
    title: str
    category: str
    start_date: Optional[str]    # YYYY-MM-DDTHH:MM:SSZ
    end_date: Optional[str]
    location: Optional[str]
    description: Optional[str]
    source: str
    created_at: str

    @property
    def has_date(self) -> bool:
        return bool(self.start_date)

    def to_dict(self) -> Dict[str, Any]:
        return {WIRE_KEYS[k]: v for k, v in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Build an Event from a store record.

        Accepts both the camelCase wire keys and the attribute names.
        Raises ValueError when the record has no id or no title.
        """
        values: Dict[str, Any] = {}
        for attr, key in WIRE_KEYS.items():
            v = data.get(key, data.get(attr))
            values[attr] = None if v == "" else v
        if not values["id"] or not str(values["title"] or "").strip():
            raise ValueError("event record needs an id and a title")
        values["title"] = str(values["title"]).strip()
        values["category"] = values["category"] or ""
        values["source"] = values["source"] or ""
        values["created_at"] = values["created_at"] or ""
        return cls(**values)
