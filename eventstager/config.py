# eventstager/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .errors import ConfigError

DEFAULT_CONFIG_FILE = Path("eventstager.yaml")
DEFAULT_CATEGORIES = ["Sports", "Home", "Social"]

# env var -> settings field
ENV_OVERRIDES = {
    "EVENTSTAGER_STORE": "store_path",
    "EVENTSTAGER_EXPORT_DIR": "export_dir",
    "EVENTSTAGER_CATEGORY": "default_category",
    "EVENTSTAGER_LOG_LEVEL": "log_level",
}


@dataclass
class Settings:
    store_path: Path = Path("state/events.json")
    export_dir: Path = Path("build")
    default_category: str = "Sports"
    categories: List[str] = field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    log_level: str = "INFO"


def _read_yaml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a mapping, got {type(data).__name__}")
    return data


def _apply(settings: Settings, key: str, value: Any) -> None:
    if value is None:
        return
    if key in ("store_path", "export_dir"):
        setattr(settings, key, Path(str(value)))
    elif key == "categories":
        if not isinstance(value, list) or not all(isinstance(c, str) for c in value):
            raise ConfigError("categories must be a list of strings")
        settings.categories = [c.strip() for c in value if c.strip()]
    elif key in ("default_category", "log_level"):
        setattr(settings, key, str(value).strip())
    # anything else is ignored


def load_settings(path: Optional[Path] = None) -> Settings:
    """
    Defaults, then the YAML file (explicit path, $EVENTSTAGER_CONFIG, or
    ./eventstager.yaml when present), then EVENTSTAGER_* env overrides.
    """
    settings = Settings()

    if path is None:
        env_path = os.environ.get("EVENTSTAGER_CONFIG")
        if env_path:
            path = Path(env_path)
        elif DEFAULT_CONFIG_FILE.exists():
            path = DEFAULT_CONFIG_FILE

    if path is not None:
        for key, value in _read_yaml(Path(path)).items():
            _apply(settings, str(key), value)

    for var, key in ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if value:
            _apply(settings, key, value)
    return settings
