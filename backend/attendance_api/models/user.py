"""User model for authentication and student profiles."""
from werkzeug.security import generate_password_hash, check_password_hash
from attendance_api import db
from attendance_api.models.base import BaseModel

class User(BaseModel):
    """Student account."""

    __tablename__ = 'users'

    # Basic Information
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    name = db.Column(db.String(100), nullable=False)

    # Student Information
    nis = db.Column(db.String(20), nullable=True, index=True)  # student number
    kelas = db.Column(db.String(50), nullable=True)  # class
    jurusan = db.Column(db.String(100), nullable=True)  # major

    # Contact Information
    phone = db.Column(db.String(20), nullable=True)
    avatar = db.Column(db.String(500), nullable=True)

    # Account State
    is_active = db.Column(db.Boolean, default=True, nullable=False, index=True)
    last_login = db.Column(db.DateTime, nullable=True)

    # Relationships
    attendance_records = db.relationship('AttendanceRecord', backref='user', lazy='dynamic')

    def set_password(self, password: str) -> None:
        """Set user password with hashing."""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        """Check if provided password matches user's password."""
        return check_password_hash(self.password_hash, password)

    def to_dict(self, exclude: list = None) -> dict:
        """Convert to dictionary excluding sensitive data."""
        default_exclude = ['password_hash']
        exclude = (exclude or []) + default_exclude
        return super().to_dict(exclude=exclude)

    def to_public_dict(self) -> dict:
        """Identity fields embedded in attendance responses."""
        return {
            'id': self.id,
            'nis': self.nis,
            'name': self.name,
            'kelas': self.kelas,
            'jurusan': self.jurusan,
            'email': self.email,
            'phone': self.phone
        }

    def __repr__(self) -> str:
        return f'<User {self.email}>'
