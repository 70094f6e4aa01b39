"""
Tests for bedtime extraction from timestamps
"""

from datetime import datetime, timedelta, timezone

from vitalscore.health_scoring.schemas import SleepSample
from vitalscore.utils.timezone import bedtime_minutes, get_zoneinfo, to_local_naive
from vitalscore.utils.unit_converter import DurationUnit


def test_naive_datetime_is_already_local():
    assert bedtime_minutes(datetime(2024, 3, 1, 23, 15)) == 23 * 60 + 15


def test_aware_datetime_converted_to_zone():
    # 04:30 UTC is 23:30 the previous evening in New York (EST)
    utc = datetime(2024, 1, 10, 4, 30, tzinfo=timezone.utc)
    assert bedtime_minutes(utc, "America/New_York") == 23 * 60 + 30


def test_unknown_zone_falls_back_to_utc():
    assert get_zoneinfo("Mars/Olympus_Mons") is None
    aware = datetime(2024, 1, 10, 1, 0, tzinfo=timezone(timedelta(hours=2)))
    assert to_local_naive(aware, "Mars/Olympus_Mons") == datetime(2024, 1, 9, 23, 0)


def test_none_passes_through():
    assert bedtime_minutes(None) is None


def test_sample_with_bedtime_timestamp():
    sample = SleepSample.from_durations(
        unit=DurationUnit.MINUTES,
        total=450,
        in_bed=480,
        bedtime=datetime(2024, 1, 10, 5, 0, tzinfo=timezone.utc),
        tz_name="Europe/Berlin",
    )
    assert sample.bedtime_minutes == 6 * 60
