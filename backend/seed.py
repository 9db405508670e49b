"""
Synthetic demo data.

One night per day for the last `days` days: bedtime between 22:00 and
midnight, wake-up 6–9 hours later, and on roughly half the nights a
400 mg supplement an hour before bed.
"""

import random
from datetime import datetime, timedelta
from typing import List, Optional

from event_types import SLEEP_END, SLEEP_START, SUPPLEMENT
from localtime import as_local
from settings import settings
from models import EventCreate
from service_events import EventService


def generate_demo_events(
    days: int,
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> List[EventCreate]:
    rng = rng or random.Random()
    now = as_local(now) if now is not None else datetime.now(settings.tz)

    events: List[EventCreate] = []
    for i in range(days):
        day = (now - timedelta(days=i)).replace(hour=22, minute=0, second=0, microsecond=0)
        bedtime = day + timedelta(minutes=rng.randint(0, 119))
        waketime = bedtime + timedelta(minutes=rng.randint(6 * 60, 9 * 60))
        minutes = (waketime - bedtime).total_seconds() / 60

        events.append(EventCreate(timestamp=bedtime, type=SLEEP_START))
        events.append(EventCreate(timestamp=waketime, type=SLEEP_END, value=minutes, unit="minutes"))
        if rng.random() > 0.5:
            events.append(EventCreate(
                timestamp=bedtime - timedelta(hours=1), type=SUPPLEMENT, value=400, unit="mg",
            ))
    return events


def seed_events(svc: EventService, owner: str, days: int, rng: Optional[random.Random] = None) -> int:
    """Write a demo history for `owner` through the service. Returns the count."""

    # NOTE: call the facade/service, NOT the raw repo
    events = generate_demo_events(days, rng=rng)
    for e in events:
        svc.create_event(e, owner)
    return len(events)
