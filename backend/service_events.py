"""
Service / facade layer.

This module implements business rules and normalization before any DB
interaction. It is intentionally free of SQL — it calls `EventRepo` to
perform database operations. All write paths (the form, `/seed`) go
through this service so every stored event obeys the same rules.

Key responsibilities:
- validate event semantics (known `type`, value/unit pairing)
- derive `category`/`name` from the static type map
- normalize timestamps into the configured local zone
- fill a wake-up's sleep duration from the preceding bedtime
- scope every store call to an explicit owner
"""

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from errors import EventValidationError, StorageUnavailable
from event_types import EVENT_KINDS, SLEEP_END, SLEEP_START
from localtime import as_local
from models import EventCreate
from repo_events import EventRepo
from settings import settings

logger = logging.getLogger(__name__)


class EventService:
    """Business rules + validation + normalization.

    Example usage:
        repo = EventRepo()
        svc = EventService(repo)
        svc.create_event(EventCreate(timestamp=..., type="sleep_start"), owner="demo-user-id")
    """

    def __init__(self, repo: EventRepo):
        self.repo = repo

    def create_event(self, payload: EventCreate, owner: str) -> Dict[str, Any]:
        """Validate, derive and persist a single event.

        Raises:
        - `EventValidationError` for an unknown type or a bad value/unit pair
        - `StorageUnavailable` when the repository cannot write
        """

        kind = EVENT_KINDS.get(payload.type)
        if kind is None:
            raise EventValidationError(
                f"Unsupported event type: {payload.type} (expected one of {', '.join(EVENT_KINDS)})"
            )

        ts = as_local(payload.timestamp)
        value, unit = payload.value, payload.unit

        if value is not None:
            if not math.isfinite(value) or value < 0:
                raise EventValidationError(f"value must be a non-negative number, got {value}")
            unit = unit or kind.default_unit
            if unit is None:
                raise EventValidationError(f"A value for '{payload.type}' needs a unit")
        elif unit is not None:
            raise EventValidationError("unit given without a value")

        if payload.type == SLEEP_END and value is None:
            minutes = self._minutes_since_bedtime(owner, ts)
            if minutes is not None:
                value, unit = float(minutes), "minutes"

        try:
            event = self.repo.insert_event(
                owner, ts, payload.type, kind.category, kind.name, value, unit
            )
        except StorageUnavailable:
            logger.exception("Could not store %s event for %s", payload.type, owner)
            raise
        logger.info("Stored %s event %s at %s", payload.type, event["id"], ts.isoformat())
        return event

    def list_events(
        self,
        owner: str,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """Return the owner's events within the inclusive bounds, newest first."""

        start = as_local(start) if start is not None else None
        end = as_local(end) if end is not None else None
        if start is not None and end is not None and start > end:
            raise EventValidationError("start must not be after end")
        return self.repo.fetch_events(owner, start, end)

    def health_check(self) -> None:
        """Perform a lightweight DB ping via the repository."""

        self.repo.ping()

    def _minutes_since_bedtime(self, owner: str, wake: datetime) -> Optional[int]:
        window = timedelta(hours=settings.max_session_hours)
        bedtime = self.repo.fetch_latest(owner, SLEEP_START, before=wake, after=wake - window)
        if bedtime is None:
            return None
        return int((wake - as_local(bedtime["timestamp"])).total_seconds() // 60)
