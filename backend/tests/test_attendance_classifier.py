"""Tests for check-in time classification."""
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from attendance_api.models.attendance import AttendanceStatus
from attendance_api.policy import SchoolPolicy
from attendance_api.services.attendance_classifier import AttendanceClassifier

JAKARTA = ZoneInfo('Asia/Jakarta')


@pytest.fixture
def classifier():
    return AttendanceClassifier(SchoolPolicy(
        latitude=-8.1575, longitude=113.722778, radius_km=0.1,
        start_hour=7, start_minute=0, end_hour=15, end_minute=30,
        late_threshold_minutes=30, timezone='Asia/Jakarta'
    ))


def local(hour, minute, second=0):
    return datetime(2025, 6, 18, hour, minute, second, tzinfo=JAKARTA)


@pytest.mark.parametrize('instant,expected', [
    (local(6, 59), AttendanceStatus.PRESENT),
    (local(7, 0), AttendanceStatus.PRESENT),
    (local(7, 0, 1), AttendanceStatus.LATE),
    (local(7, 15), AttendanceStatus.LATE),
    (local(7, 29, 59), AttendanceStatus.LATE),
    (local(7, 30), AttendanceStatus.ABSENT),
    (local(12, 0), AttendanceStatus.ABSENT),
])
def test_classify_boundaries(classifier, instant, expected):
    assert classifier.classify(instant) is expected


def test_naive_datetimes_are_utc(classifier):
    # 00:00 UTC is 07:00 in Jakarta
    assert classifier.classify(datetime(2025, 6, 18, 0, 0)) is AttendanceStatus.PRESENT
    assert classifier.classify(datetime(2025, 6, 18, 0, 15)) is AttendanceStatus.LATE
    assert classifier.classify(datetime(2025, 6, 18, 0, 30)) is AttendanceStatus.ABSENT


def test_aware_utc_instant(classifier):
    instant = datetime(2025, 6, 17, 23, 59, tzinfo=timezone.utc)
    assert classifier.classify(instant) is AttendanceStatus.PRESENT


def test_zero_threshold_has_no_late_window():
    classifier = AttendanceClassifier(SchoolPolicy(
        latitude=0, longitude=0, radius_km=1, start_hour=7, start_minute=0,
        end_hour=15, end_minute=0, late_threshold_minutes=0
    ))
    start = local(7, 0)
    assert classifier.classify(start) is AttendanceStatus.PRESENT
    assert classifier.classify(start + timedelta(seconds=1)) is AttendanceStatus.ABSENT


def test_school_hours(classifier):
    start, end = classifier.school_hours(date(2025, 6, 18))
    assert (start.hour, start.minute) == (7, 0)
    assert (end.hour, end.minute) == (15, 30)
    assert start.tzinfo == JAKARTA


@pytest.mark.parametrize('day,expected', [
    (date(2025, 6, 18), True),    # Wednesday
    (date(2025, 6, 21), False),   # Saturday
    (date(2025, 6, 22), False),   # Sunday
    (date(2025, 8, 18), True),    # Monday
    (date(2023, 8, 17), False),   # Independence Day, a Thursday
    (date(2026, 1, 1), False),    # New Year, a Thursday
])
def test_is_school_day(day, expected):
    assert AttendanceClassifier.is_school_day(day) is expected
