"""Daily attendance record."""
from enum import Enum
from attendance_api import db
from attendance_api.models.base import BaseModel

class AttendanceStatus(Enum):
    """Attendance status, fixed at check-in."""
    PRESENT = 'present'
    LATE = 'late'
    ABSENT = 'absent'

class AttendanceRecord(BaseModel):
    """One record per user per calendar day (UTC)."""

    __tablename__ = 'attendance_records'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='uq_attendance_user_date'),
    )

    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    check_in = db.Column(db.DateTime, nullable=True)
    check_out = db.Column(db.DateTime, nullable=True)
    status = db.Column(db.Enum(AttendanceStatus), nullable=False)

    # Location where check-in happened
    latitude = db.Column(db.Float, nullable=False)
    longitude = db.Column(db.Float, nullable=False)
    address = db.Column(db.String(255), nullable=True)

    @property
    def location(self) -> dict:
        location = {
            'latitude': self.latitude,
            'longitude': self.longitude
        }
        if self.address:
            location['address'] = self.address
        return location

    def to_history_dict(self) -> dict:
        """Compact form used in history listings."""
        return {
            'date': self.date.isoformat(),
            'check_in': self.check_in.isoformat() if self.check_in else None,
            'check_out': self.check_out.isoformat() if self.check_out else None,
            'status': self.status.value,
            'location': self.location
        }

    def to_dict(self, exclude: list = None) -> dict:
        result = self.to_history_dict()
        result.update({
            'id': self.id,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        })
        return result

    def __repr__(self):
        return f'<AttendanceRecord {self.user_id}-{self.date}>'
