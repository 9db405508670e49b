"""
Tests for EventService: type mapping, value/unit rules, reads and
the wake-up duration lookup.
"""

from datetime import datetime, timezone

import pytest

from errors import EventValidationError, StorageUnavailable
from event_types import EVENT_KINDS
from models import EventCreate
from settings import settings

OWNER = "demo-user-id"


def add(svc, ts, type, **kw):
    return svc.create_event(EventCreate(timestamp=ts, type=type, **kw), OWNER)


@pytest.mark.parametrize("type", list(EVENT_KINDS))
def test_create_fills_category_and_name_from_type_map(svc, type):
    kw = {"value": 400} if type == "supplement" else {}
    event = add(svc, "2024-01-01T22:00", type, **kw)

    assert event["category"] == EVENT_KINDS[type].category
    assert event["name"] == EVENT_KINDS[type].name
    assert event["type"] == type
    assert event["userId"] == OWNER
    assert event["id"]


def test_create_rejects_unknown_type(svc, repo):
    with pytest.raises(EventValidationError, match="Unsupported event type"):
        add(svc, "2024-01-01T22:00", "nap")
    assert repo.rows == []


def test_naive_timestamp_is_read_as_local_time(svc):
    event = add(svc, "2024-01-01T22:00", "sleep_start")
    assert event["timestamp"] == datetime(2024, 1, 1, 22, 0, tzinfo=timezone.utc)


def test_aware_timestamp_is_converted(svc):
    event = add(svc, "2024-01-01T23:00:00+01:00", "sleep_start")
    assert event["timestamp"] == datetime(2024, 1, 1, 22, 0, tzinfo=timezone.utc)


def test_supplement_value_gets_default_unit(svc):
    event = add(svc, "2024-01-01T21:00", "supplement", value=400)
    assert event["value"] == 400
    assert event["unit"] == "mg"


def test_explicit_unit_is_kept(svc):
    event = add(svc, "2024-01-01T21:00", "supplement", value=2, unit="g")
    assert event["unit"] == "g"


def test_unit_without_value_is_rejected(svc, repo):
    with pytest.raises(EventValidationError, match="unit given without a value"):
        add(svc, "2024-01-01T21:00", "supplement", unit="mg")
    assert repo.rows == []


def test_value_for_type_without_unit_is_rejected(svc):
    with pytest.raises(EventValidationError, match="needs a unit"):
        add(svc, "2024-01-01T22:00", "sleep_start", value=3)


def test_negative_value_is_rejected(svc):
    with pytest.raises(EventValidationError):
        add(svc, "2024-01-01T21:00", "supplement", value=-1)


def test_event_without_value_has_no_value_or_unit(svc):
    event = add(svc, "2024-01-01T22:00", "sleep_start")
    assert "value" not in event and "unit" not in event


def test_wake_time_derives_duration_from_preceding_bedtime(svc):
    add(svc, "2024-01-01T23:00", "sleep_start")
    wake = add(svc, "2024-01-02T06:30", "sleep_end")

    assert wake["value"] == 450.0
    assert wake["unit"] == "minutes"


def test_wake_time_without_recent_bedtime_has_no_duration(svc):
    add(svc, "2024-01-01T01:00", "sleep_start")  # more than 16h before
    wake = add(svc, "2024-01-02T06:30", "sleep_end")
    assert "value" not in wake


def test_wake_time_keeps_explicit_duration(svc):
    add(svc, "2024-01-01T23:00", "sleep_start")
    wake = add(svc, "2024-01-02T06:30", "sleep_end", value=400)
    assert wake["value"] == 400
    assert wake["unit"] == "minutes"


def test_list_without_bounds_returns_all_newest_first(svc):
    for ts in ["2024-01-02T08:00", "2024-01-01T22:00", "2024-01-03T07:00"]:
        add(svc, ts, "sleep_start")

    events = svc.list_events(OWNER)
    stamps = [e["timestamp"] for e in events]

    assert len(events) == 3
    assert all(a > b for a, b in zip(stamps, stamps[1:]))


def test_list_bounds_are_inclusive(svc):
    for ts in ["2024-01-01T22:00", "2024-01-02T22:00", "2024-01-03T22:00", "2024-01-04T22:00"]:
        add(svc, ts, "sleep_start")

    events = svc.list_events(
        OWNER, start=datetime(2024, 1, 2, 22, 0), end=datetime(2024, 1, 3, 22, 0)
    )

    assert [e["timestamp"].day for e in events] == [3, 2]


def test_list_with_only_start(svc):
    for ts in ["2024-01-01T22:00", "2024-01-02T22:00"]:
        add(svc, ts, "sleep_start")
    events = svc.list_events(OWNER, start=datetime(2024, 1, 2))
    assert [e["timestamp"].day for e in events] == [2]


def test_list_returns_empty_when_nothing_matches(svc):
    add(svc, "2024-01-01T22:00", "sleep_start")
    assert svc.list_events(OWNER, start=datetime(2025, 1, 1)) == []


def test_list_is_scoped_to_owner(svc, repo):
    add(svc, "2024-01-01T22:00", "sleep_start")
    assert svc.list_events("someone-else") == []


def test_list_rejects_inverted_range(svc):
    with pytest.raises(EventValidationError):
        svc.list_events(OWNER, start=datetime(2024, 2, 1), end=datetime(2024, 1, 1))


def test_storage_failure_propagates(svc, repo):
    repo.down = True
    with pytest.raises(StorageUnavailable):
        add(svc, "2024-01-01T22:00", "sleep_start")
    with pytest.raises(StorageUnavailable):
        svc.health_check()


def test_naive_bounds_are_read_in_configured_zone(svc, monkeypatch):
    monkeypatch.setattr(settings, "local_tz", "America/Los_Angeles")
    add(svc, "2024-01-02T05:00:00+00:00", "sleep_start")   # 21:00 Jan 1 in LA

    same_day = svc.list_events(OWNER, start=datetime(2024, 1, 1), end=datetime(2024, 1, 1, 23, 59))
    next_day = svc.list_events(OWNER, start=datetime(2024, 1, 2))

    assert len(same_day) == 1
    assert same_day[0]["timestamp"].date().isoformat() == "2024-01-01"
    assert next_day == []


def test_naive_timestamp_is_read_in_configured_zone(svc, monkeypatch):
    monkeypatch.setattr(settings, "local_tz", "America/Los_Angeles")
    event = add(svc, "2024-01-01T22:00", "sleep_start")
    assert event["timestamp"] == datetime(2024, 1, 2, 6, 0, tzinfo=timezone.utc)
