"""
Sleep aggregator: turns bedtime / wake-up events into nightly durations.

Two pairing modes exist (`SLEEP_BUCKETING`):

- `calendar_date` (default): events are bucketed by local calendar date
  and a night exists whenever one date holds both a `sleep_start` and a
  `sleep_end`. The earliest of each kind per date wins. A session that
  crosses midnight is split over two buckets and yields no night, and a
  date holding a morning wake-up and an evening bedtime yields a negative
  duration.
- `session`: each `sleep_start` is paired with the next `sleep_end` no
  more than `MAX_SESSION_HOURS` later; the night belongs to the bedtime's
  date.

Either way only the most recent `SLEEP_WINDOW_NIGHTS` nights are kept,
oldest first, which is what the bar chart plots.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional, Tuple

from event_types import SLEEP_END, SLEEP_START
from localtime import as_local
from settings import settings

Night = Tuple[date, datetime, datetime]


def round_1(x: float) -> float:
    """Round half-up to one decimal (0.05 -> 0.1, not banker's rounding)."""
    return float(Decimal(str(x)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def duration_minutes(start: datetime, end: datetime) -> int:
    return int((end - start).total_seconds() / 60)


def _sleep_events(events: Iterable[Dict[str, Any]]) -> List[Tuple[datetime, str]]:
    out = [
        (as_local(e["timestamp"]), e["type"])
        for e in events
        if e["type"] in (SLEEP_START, SLEEP_END)
    ]
    out.sort(key=lambda x: x[0])
    return out


def pair_by_calendar_date(events: Iterable[Dict[str, Any]]) -> List[Night]:
    buckets: Dict[date, Dict[str, datetime]] = {}
    for ts, kind in _sleep_events(events):
        # ascending order, so setdefault keeps the earliest of each kind
        buckets.setdefault(ts.date(), {}).setdefault(kind, ts)

    nights = []
    for day, b in buckets.items():
        start, end = b.get(SLEEP_START), b.get(SLEEP_END)
        if start is not None and end is not None:
            nights.append((day, start, end))
    return nights


def pair_by_session(events: Iterable[Dict[str, Any]], max_hours: Optional[int] = None) -> List[Night]:
    limit = timedelta(hours=max_hours if max_hours is not None else settings.max_session_hours)
    nights: Dict[date, Night] = {}
    bedtime: Optional[datetime] = None
    for ts, kind in _sleep_events(events):
        if kind == SLEEP_START:
            bedtime = ts
            continue
        if bedtime is not None and timedelta(0) < ts - bedtime <= limit:
            nights.setdefault(bedtime.date(), (bedtime.date(), bedtime, ts))
        bedtime = None
    return list(nights.values())


def summarize_sleep(
    events: Iterable[Dict[str, Any]],
    bucketing: Optional[str] = None,
    window: Optional[int] = None,
) -> Dict[str, Any]:
    """Build the chart payload: `{"nights": [...], "averageHours": float}`.

    Each night is `{"date": "2024-01-01", "label": "Jan 1", "minutes": 90,
    "hours": 1.5}`. `averageHours` is the mean of the listed `hours`, or 0
    when there are none.
    """

    bucketing = bucketing or settings.sleep_bucketing
    window = window if window is not None else settings.sleep_window_nights

    if bucketing == "session":
        paired = pair_by_session(events)
    elif bucketing == "calendar_date":
        paired = pair_by_calendar_date(events)
    else:
        raise ValueError(f"Unknown sleep bucketing mode: {bucketing!r}")

    paired.sort(key=lambda n: n[0])
    recent = paired[-window:] if window > 0 else []

    nights = []
    for day, start, end in recent:
        minutes = duration_minutes(start, end)
        nights.append({
            "date": day.isoformat(),
            "label": f"{day:%b} {day.day}",
            "minutes": minutes,
            "hours": round_1(minutes / 60),
        })

    average = round_1(sum(n["hours"] for n in nights) / len(nights)) if nights else 0
    return {"nights": nights, "averageHours": average}
