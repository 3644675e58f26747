"""Tests for attendance state transitions."""
from datetime import date, datetime, timedelta, timezone

import pytest

from attendance_api import db
from attendance_api.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_api.services.attendance_service import AttendanceService
from attendance_api.utils.errors import (
    AlreadyCheckedIn, AlreadyCheckedOut, NoCheckInFound
)

# 07:10 in Jakarta
MORNING = datetime(2025, 6, 18, 0, 10)
LOCATION = {'latitude': -8.1575, 'longitude': 113.722778, 'address': 'Main gate'}


def add_record(user, day, status):
    record = AttendanceRecord(
        user_id=user.id, date=day, check_in=datetime.combine(day, datetime.min.time()),
        status=status, latitude=-8.1575, longitude=113.722778
    )
    db.session.add(record)
    db.session.commit()
    return record


def test_check_in_creates_record(sample_user):
    record = AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)

    assert record.id is not None
    assert record.date == date(2025, 6, 18)
    assert record.check_in == MORNING
    assert record.check_out is None
    assert record.status is AttendanceStatus.LATE
    assert record.location == LOCATION


def test_check_in_accepts_aware_now(sample_user):
    now = datetime(2025, 6, 18, 6, 55, tzinfo=timezone(timedelta(hours=7)))
    record = AttendanceService.check_in(sample_user.id, LOCATION, now=now)

    assert record.check_in == datetime(2025, 6, 17, 23, 55)
    assert record.date == date(2025, 6, 17)
    assert record.status is AttendanceStatus.PRESENT


def test_second_check_in_same_day_conflicts(sample_user):
    AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)
    with pytest.raises(AlreadyCheckedIn):
        AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING + timedelta(hours=1))


def test_check_in_next_day_allowed(sample_user):
    AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)
    record = AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING + timedelta(days=1))
    assert record.date == date(2025, 6, 19)


def test_racing_check_in_maps_to_already_checked_in(sample_user, monkeypatch):
    AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)

    # The second request read before the first one committed
    monkeypatch.setattr(AttendanceService, '_find', staticmethod(lambda user_id, day: None))

    with pytest.raises(AlreadyCheckedIn):
        AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)

    monkeypatch.undo()
    assert AttendanceRecord.query.filter_by(user_id=sample_user.id).count() == 1


def test_status_fixed_at_check_in(sample_user):
    AttendanceService.check_in(sample_user.id, LOCATION, now=datetime(2025, 6, 17, 23, 50))
    record = AttendanceService.check_out(sample_user.id, LOCATION, now=datetime(2025, 6, 17, 23, 59))
    assert record.status is AttendanceStatus.PRESENT


def test_check_out_without_check_in(sample_user):
    with pytest.raises(NoCheckInFound):
        AttendanceService.check_out(sample_user.id, LOCATION, now=MORNING)


def test_check_out_twice(sample_user):
    AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)
    record = AttendanceService.check_out(sample_user.id, LOCATION, now=MORNING + timedelta(hours=8))
    assert record.check_out == MORNING + timedelta(hours=8)

    with pytest.raises(AlreadyCheckedOut):
        AttendanceService.check_out(sample_user.id, LOCATION, now=MORNING + timedelta(hours=9))


def test_check_out_never_precedes_check_in(sample_user):
    AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)
    record = AttendanceService.check_out(sample_user.id, LOCATION, now=MORNING - timedelta(minutes=5))
    assert record.check_out == record.check_in


def test_get_today(sample_user):
    assert AttendanceService.get_today(sample_user.id, now=MORNING) is None

    AttendanceService.check_in(sample_user.id, LOCATION, now=MORNING)
    record = AttendanceService.get_today(sample_user.id, now=MORNING)
    assert record is not None
    assert record.user_id == sample_user.id


def test_get_by_date(sample_user):
    add_record(sample_user, date(2025, 6, 2), AttendanceStatus.PRESENT)
    assert AttendanceService.get_by_date(sample_user.id, date(2025, 6, 2)) is not None
    assert AttendanceService.get_by_date(sample_user.id, date(2025, 6, 3)) is None


def test_history_newest_first_with_total(sample_user, make_user):
    for offset in range(5):
        add_record(sample_user, date(2025, 6, 2) + timedelta(days=offset), AttendanceStatus.PRESENT)
    add_record(make_user(), date(2025, 6, 2), AttendanceStatus.LATE)

    records, total = AttendanceService.get_history(sample_user.id, limit=2, offset=0)
    assert total == 5
    assert [r.date for r in records] == [date(2025, 6, 6), date(2025, 6, 5)]

    records, total = AttendanceService.get_history(sample_user.id, limit=2, offset=4)
    assert [r.date for r in records] == [date(2025, 6, 2)]


def test_stats_percentage(sample_user):
    statuses = [AttendanceStatus.PRESENT] * 3 + [AttendanceStatus.LATE, AttendanceStatus.ABSENT]
    for offset, status in enumerate(statuses):
        add_record(sample_user, date(2025, 6, 2) + timedelta(days=offset), status)

    stats = AttendanceService.get_stats(sample_user.id)
    assert stats == {
        'total_present': 3,
        'total_late': 1,
        'total_absent': 1,
        'total_days': 5,
        'percentage': 60.0
    }


def test_stats_without_records(sample_user):
    stats = AttendanceService.get_stats(sample_user.id)
    assert stats['percentage'] == 0
    assert stats['total_days'] == 0


def test_stats_percentage_is_not_rounded(sample_user):
    statuses = [AttendanceStatus.PRESENT, AttendanceStatus.LATE, AttendanceStatus.ABSENT]
    for offset, status in enumerate(statuses):
        add_record(sample_user, date(2025, 6, 2) + timedelta(days=offset), status)

    stats = AttendanceService.get_stats(sample_user.id)
    assert stats['percentage'] == pytest.approx(100 / 3)
    assert stats['percentage'] != 33.33
