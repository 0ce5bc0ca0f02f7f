"""Timestamp conversion between stored UTC strings and datetime-local inputs."""

import pytest

from timesheet.services.timecalc import (
    compute_minutes,
    format_duration,
    local_input_to_utc,
    to_utc_iso,
    utc_to_local_input,
)


def test_local_input_converts_to_utc_instant():
    assert local_input_to_utc("2024-03-01T09:00", "UTC") == "2024-03-01T09:00:00Z"
    assert local_input_to_utc("2024-07-01T09:00", "Europe/Berlin") == "2024-07-01T07:00:00Z"
    assert local_input_to_utc("", "UTC") is None


def test_stored_value_renders_back_in_local_minutes():
    assert utc_to_local_input("2024-07-01T07:00:00Z", "Europe/Berlin") == "2024-07-01T09:00"
    assert utc_to_local_input(None, "UTC") == ""
    assert utc_to_local_input("garbage", "UTC") == ""


def test_invalid_local_input_raises():
    with pytest.raises(ValueError):
        local_input_to_utc("tomorrow morning", "UTC")


def test_offsets_are_normalised_to_z():
    assert to_utc_iso("2024-01-01T10:30:00+02:00", "UTC") == "2024-01-01T08:30:00Z"


def test_duration_minutes_never_negative():
    assert compute_minutes("2024-01-01T09:00:00Z", "2024-01-01T10:00:00Z", "UTC") == 60
    assert compute_minutes("2024-01-01T10:00:00Z", "2024-01-01T09:00:00Z", "UTC") == 0
    assert compute_minutes("2024-01-01T09:00:00Z", None, "UTC") == 0


def test_format_duration():
    assert format_duration(60) == "1h 00m"
    assert format_duration(135) == "2h 15m"
    assert format_duration(None) == ""
