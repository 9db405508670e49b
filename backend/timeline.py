"""Timeline presenter: events grouped by local day, newest first."""

from collections import defaultdict
from datetime import date
from typing import Any, Dict, Iterable, List, Optional

from event_types import SLEEP_END
from localtime import as_local


def format_value(value: float) -> str:
    # 400.0 -> "400", 2.5 -> "2.5"
    return f"{value:g}"


def describe(event: Dict[str, Any]) -> Optional[str]:
    value = event.get("value")
    if not isinstance(value, (int, float)):
        return None
    if event["type"] == SLEEP_END:
        hours, minutes = divmod(round(value), 60)
        return f"Duration: {hours} hours {minutes} minutes"
    unit = event.get("unit")
    return f"{format_value(value)} {unit}" if unit else format_value(value)


def build_timeline(events: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Group events into `[{"date", "label", "events": [...]}]`.

    Days are newest first and so are the events inside a day. Each entry
    is the stored event plus `time` ("10:00 PM") and `detail`.
    """

    days: Dict[date, List[Dict[str, Any]]] = defaultdict(list)
    for e in events:
        ts = as_local(e["timestamp"])
        days[ts.date()].append({
            **e,
            "timestamp": ts,
            "time": f"{ts.hour % 12 or 12}:{ts:%M %p}",
            "detail": describe(e),
        })

    out = []
    for day in sorted(days, reverse=True):
        entries = sorted(days[day], key=lambda x: x["timestamp"], reverse=True)
        out.append({
            "date": day.isoformat(),
            "label": f"{day:%A, %B} {day.day}",
            "events": entries,
        })
    return out
