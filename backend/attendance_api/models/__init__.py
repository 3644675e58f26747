"""Models package with all models."""
from .base import BaseModel
from .user import User
from .attendance import AttendanceRecord, AttendanceStatus

__all__ = [
    'BaseModel', 'User',
    'AttendanceRecord', 'AttendanceStatus'
]
