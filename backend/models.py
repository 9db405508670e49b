"""
Pydantic models used across the backend.

Only input shapes belong here. Stored events travel as plain dicts built
by `EventRepo` (keys: id, userId, timestamp, type, category, name and,
when set, value/unit), the same way the repository has always returned
rows.
"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class EventCreate(BaseModel):
        """Input shape for `POST /events`.

        Fields:
        - `timestamp`: ISO-8601 instant the event pertains to. A naive value
          (as sent by a `datetime-local` input) is read in `LOCAL_TZ`.
        - `type`: one of the kinds in `event_types.EVENT_KINDS`.
        - `value` / `unit`: optional measurement; see `EventService`.

        `category` and `name` are derived server-side; if a client sends
        them they are ignored.
        """

        timestamp: datetime
        type: str
        value: Optional[float] = None
        unit: Optional[str] = None
