"""
Static lookup table for event kinds.

The store keeps `type` as an open string; this map is what the API
accepts and how `category`/`name` get filled in at creation time.
"""

from types import MappingProxyType
from typing import NamedTuple, Optional


class EventKind(NamedTuple):
    category: str
    name: str
    default_unit: Optional[str] = None


SLEEP_START = "sleep_start"
SLEEP_END = "sleep_end"
SUPPLEMENT = "supplement"

EVENT_KINDS = MappingProxyType({
    SLEEP_START: EventKind("sleep", "Bedtime"),
    SLEEP_END: EventKind("sleep", "Wake Time", "minutes"),
    SUPPLEMENT: EventKind("intervention", "Supplement", "mg"),
})
