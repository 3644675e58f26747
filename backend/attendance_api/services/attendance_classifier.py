"""Check-in time classification against the school schedule."""
from datetime import date, datetime, timedelta, timezone
from typing import Tuple

from attendance_api.models.attendance import AttendanceStatus
from attendance_api.policy import SchoolPolicy

# Fixed national holidays as (month, day)
FIXED_HOLIDAYS = {
    (1, 1),   # New Year
    (8, 17),  # Independence Day
}


class AttendanceClassifier:
    """Maps a check-in instant to present, late or absent."""

    def __init__(self, policy: SchoolPolicy):
        self.policy = policy
        self.tz = policy.tz

    def to_local(self, instant: datetime) -> datetime:
        """Convert an instant to school wall-clock time. Naive values are UTC."""
        if instant.tzinfo is None:
            instant = instant.replace(tzinfo=timezone.utc)
        return instant.astimezone(self.tz)

    def school_start(self, local_time: datetime) -> datetime:
        return local_time.replace(
            hour=self.policy.start_hour,
            minute=self.policy.start_minute,
            second=0,
            microsecond=0
        )

    def classify(self, instant: datetime) -> AttendanceStatus:
        """Classify a check-in.

        On or before the start time is present; within the late window after
        it is late; at or after start + threshold is absent.
        """
        local_time = self.to_local(instant)
        start = self.school_start(local_time)
        late_cutoff = start + timedelta(minutes=self.policy.late_threshold_minutes)

        if local_time <= start:
            return AttendanceStatus.PRESENT
        if local_time < late_cutoff:
            return AttendanceStatus.LATE
        return AttendanceStatus.ABSENT

    def school_hours(self, day: date) -> Tuple[datetime, datetime]:
        """Local start and end of the school day."""
        start = datetime(day.year, day.month, day.day,
                         self.policy.start_hour, self.policy.start_minute, tzinfo=self.tz)
        end = datetime(day.year, day.month, day.day,
                       self.policy.end_hour, self.policy.end_minute, tzinfo=self.tz)
        return start, end

    @staticmethod
    def is_school_day(day: date) -> bool:
        if day.weekday() >= 5:
            return False
        return (day.month, day.day) not in FIXED_HOLIDAYS
