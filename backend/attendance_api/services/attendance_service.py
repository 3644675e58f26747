"""Attendance state transitions: one record per user per day."""
from datetime import date, datetime, timezone
from typing import Dict, List, Optional, Tuple

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from attendance_api import db
from attendance_api.models.attendance import AttendanceRecord, AttendanceStatus
from attendance_api.services.attendance_classifier import AttendanceClassifier
from attendance_api.utils.errors import (
    AlreadyCheckedIn, AlreadyCheckedOut, NoCheckInFound, PersistenceFailure
)
from attendance_api.utils.helpers import utcnow


def _as_utc(now: Optional[datetime]) -> datetime:
    """Normalise ``now`` to a naive UTC datetime."""
    if now is None:
        return utcnow()
    if now.tzinfo is not None:
        return now.astimezone(timezone.utc).replace(tzinfo=None)
    return now


class AttendanceService:
    """Check-in, check-out and attendance queries.

    Records are keyed by the UTC calendar date of the request time. The
    database unique constraint on ``(user_id, date)`` is what guarantees a
    single record per day when two check-ins race.
    """

    @staticmethod
    def get_classifier() -> AttendanceClassifier:
        return current_app.extensions['attendance_api']['classifier']

    @staticmethod
    def _find(user_id: int, day: date) -> Optional[AttendanceRecord]:
        try:
            return AttendanceRecord.query.filter_by(user_id=user_id, date=day).first()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Attendance lookup failed for user {user_id}: {e}')
            raise PersistenceFailure()

    @staticmethod
    def check_in(user_id: int, location: Dict, now: datetime = None) -> AttendanceRecord:
        """Create today's record, classifying the check-in time."""
        now = _as_utc(now)
        today = now.date()

        if AttendanceService._find(user_id, today) is not None:
            raise AlreadyCheckedIn()

        status = AttendanceService.get_classifier().classify(now)
        record = AttendanceRecord(
            user_id=user_id,
            date=today,
            check_in=now,
            status=status,
            latitude=location['latitude'],
            longitude=location['longitude'],
            address=location.get('address')
        )

        try:
            db.session.add(record)
            db.session.commit()
        except IntegrityError:
            # Lost a race with a concurrent check-in for the same day
            db.session.rollback()
            raise AlreadyCheckedIn()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Check-in write failed for user {user_id}: {e}')
            raise PersistenceFailure()

        current_app.logger.info(
            f'User {user_id} checked in at {now.isoformat()} with status {status.value}'
        )
        return record

    @staticmethod
    def check_out(user_id: int, location: Dict = None, now: datetime = None) -> AttendanceRecord:
        """Close today's record. Check-out never precedes check-in."""
        now = _as_utc(now)
        record = AttendanceService._find(user_id, now.date())

        if record is None:
            raise NoCheckInFound()
        if record.check_out is not None:
            raise AlreadyCheckedOut()

        record.check_out = max(now, record.check_in) if record.check_in else now
        record.updated_at = utcnow()

        try:
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Check-out write failed for user {user_id}: {e}')
            raise PersistenceFailure()

        current_app.logger.info(f'User {user_id} checked out at {record.check_out.isoformat()}')
        return record

    @staticmethod
    def get_today(user_id: int, now: datetime = None) -> Optional[AttendanceRecord]:
        return AttendanceService._find(user_id, _as_utc(now).date())

    @staticmethod
    def get_by_date(user_id: int, day: date) -> Optional[AttendanceRecord]:
        return AttendanceService._find(user_id, day)

    @staticmethod
    def get_history(user_id: int, limit: int = 10, offset: int = 0) -> Tuple[List[AttendanceRecord], int]:
        """Records newest first, plus the total count for pagination."""
        try:
            query = AttendanceRecord.query.filter_by(user_id=user_id)
            total = query.count()
            records = query.order_by(AttendanceRecord.date.desc()) \
                .offset(offset).limit(limit).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'History query failed for user {user_id}: {e}')
            raise PersistenceFailure()
        return records, total

    @staticmethod
    def get_stats(user_id: int) -> Dict:
        """Counts per status and the share of days marked present."""
        try:
            rows = db.session.query(AttendanceRecord.status, func.count(AttendanceRecord.id)) \
                .filter(AttendanceRecord.user_id == user_id) \
                .group_by(AttendanceRecord.status).all()
        except SQLAlchemyError as e:
            db.session.rollback()
            current_app.logger.error(f'Stats query failed for user {user_id}: {e}')
            raise PersistenceFailure()

        counts = {status: 0 for status in AttendanceStatus}
        for status, count in rows:
            counts[status] = count

        total = sum(counts.values())
        present = counts[AttendanceStatus.PRESENT]
        percentage = present * 100 / total if total else 0.0

        return {
            'total_present': present,
            'total_late': counts[AttendanceStatus.LATE],
            'total_absent': counts[AttendanceStatus.ABSENT],
            'total_days': total,
            'percentage': percentage
        }
