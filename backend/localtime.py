"""Local-time helpers: everything date-shaped is computed in `settings.tz`."""

from datetime import date, datetime

from settings import settings


def as_local(ts: datetime) -> datetime:
    """Return `ts` as an aware datetime in the configured zone.

    Naive values are taken to already be local wall-clock time, which is
    what the form's `datetime-local` input sends.
    """

    if ts.tzinfo is None:
        return ts.replace(tzinfo=settings.tz)
    return ts.astimezone(settings.tz)


def local_date(ts: datetime) -> date:
    return as_local(ts).date()
