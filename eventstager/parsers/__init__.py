# Keep this package lightweight; re-export parser entry points only.
from .ics_feed import parse_ics
from .delimited import parse_delimited
from .json_feed import parse_json
from .xml_feed import parse_xml

__all__ = [
    "parse_ics",
    "parse_delimited",
    "parse_json",
    "parse_xml",
]
