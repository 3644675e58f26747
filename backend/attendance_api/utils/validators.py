"""Validation utilities for the application."""
import html
import math
import re
from typing import Any, Dict, List, Optional

from attendance_api.utils.errors import ValidationError

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


def sanitize_input(value: Optional[str]) -> str:
    """Trim and HTML-escape free text before it is stored."""
    if value is None:
        return ''
    return html.escape(str(value).strip())


class Validator:
    """Validation helper class."""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format."""
        if not email:
            return False
        return bool(EMAIL_PATTERN.match(email))

    @staticmethod
    def validate_password(password: str, max_length: int = 128) -> Dict[str, Any]:
        """Validate password length."""
        errors = []

        if not password:
            errors.append("Password is required")
        elif not isinstance(password, str):
            errors.append("Password must be a string")
        elif len(password) < 6:
            errors.append("Password must be at least 6 characters long")
        elif len(password) > max_length:
            errors.append("Password is too long")

        return {
            "is_valid": len(errors) == 0,
            "errors": errors
        }

    @staticmethod
    def validate_length(value: Any, field: str, min_length: int, max_length: int,
                        required: bool = True) -> List[str]:
        """Validate a string field's presence and length."""
        if value is None or (isinstance(value, str) and not value.strip()):
            return [f"{field} is required"] if required else []

        if not isinstance(value, str):
            return [f"{field} must be a string"]

        length = len(value.strip())
        if length < min_length:
            return [f"{field} must be at least {min_length} characters"]
        if length > max_length:
            return [f"{field} must be at most {max_length} characters"]
        return []


def require_json_object(data: Any) -> Dict:
    if not isinstance(data, dict):
        raise ValidationError("Invalid request body")
    return data


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _finite_float(value: Any) -> Optional[float]:
    """Float value of a JSON number, or None when it has no finite float form."""
    if not _is_number(value):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def parse_location_payload(data: Any) -> Dict[str, Any]:
    """Parse a check-in/check-out body into latitude, longitude and address."""
    data = require_json_object(data)

    errors = []
    coordinates = {}
    for field in ('latitude', 'longitude'):
        if field not in data or data[field] is None:
            errors.append(f"{field} is required")
            continue
        coordinates[field] = _finite_float(data[field])
        if coordinates[field] is None:
            errors.append(f"{field} must be a number")

    address = data.get('address')
    if address is not None and not isinstance(address, str):
        errors.append("address must be a string")
    elif address and len(address) > 255:
        errors.append("address must be at most 255 characters")

    if errors:
        raise ValidationError("Validation failed", errors)

    return {
        'latitude': coordinates['latitude'],
        'longitude': coordinates['longitude'],
        'address': sanitize_input(address) if address else None
    }


def validate_register_payload(data: Any) -> Dict[str, Any]:
    """Validate a registration body and return the cleaned fields."""
    data = require_json_object(data)

    errors = []
    errors += Validator.validate_length(data.get('nis'), 'nis', 3, 20)
    errors += Validator.validate_length(data.get('name'), 'name', 2, 100)
    errors += Validator.validate_length(data.get('kelas'), 'kelas', 1, 50)
    errors += Validator.validate_length(data.get('jurusan'), 'jurusan', 2, 100)

    email = data.get('email')
    if not isinstance(email, str) or not Validator.validate_email(email.strip()):
        errors.append("email must be a valid email")

    errors += Validator.validate_password(data.get('password'))['errors']
    errors += Validator.validate_length(data.get('phone'), 'phone', 10, 15, required=False)

    if errors:
        raise ValidationError("Validation failed", errors)

    return {
        'nis': sanitize_input(data['nis']),
        'name': sanitize_input(data['name']),
        'kelas': sanitize_input(data['kelas']),
        'jurusan': sanitize_input(data['jurusan']),
        'email': email.strip().lower(),
        'password': data['password'],
        'phone': sanitize_input(data.get('phone')) or None
    }


def validate_login_payload(data: Any) -> Dict[str, str]:
    data = require_json_object(data)

    errors = []
    email = data.get('email')
    if not isinstance(email, str) or not Validator.validate_email(email.strip()):
        errors.append("email must be a valid email")
    errors += Validator.validate_password(data.get('password'))['errors']

    if errors:
        raise ValidationError("Validation failed", errors)

    return {'email': email.strip().lower(), 'password': data['password']}


def validate_profile_payload(data: Any) -> Dict[str, Any]:
    """Validate a profile update body."""
    data = require_json_object(data)

    errors = []
    errors += Validator.validate_length(data.get('name'), 'name', 2, 100)
    errors += Validator.validate_length(data.get('kelas'), 'kelas', 1, 50)
    errors += Validator.validate_length(data.get('jurusan'), 'jurusan', 2, 100)
    errors += Validator.validate_length(data.get('phone'), 'phone', 10, 15, required=False)

    avatar = data.get('avatar')
    if avatar:
        if not isinstance(avatar, str) or not avatar.strip().startswith(('http://', 'https://')):
            errors.append("avatar must be a valid URL")

    if errors:
        raise ValidationError("Validation failed", errors)

    cleaned = {
        'name': sanitize_input(data['name']),
        'kelas': sanitize_input(data['kelas']),
        'jurusan': sanitize_input(data['jurusan'])
    }
    if data.get('phone'):
        cleaned['phone'] = sanitize_input(data['phone'])
    if avatar:
        cleaned['avatar'] = avatar.strip()
    return cleaned


def validate_change_password_payload(data: Any) -> Dict[str, str]:
    data = require_json_object(data)

    current_password = data.get('current_password')
    new_password = data.get('new_password')

    errors = []
    if not current_password or not isinstance(current_password, str):
        errors.append("current_password is required")
    result = Validator.validate_password(new_password, max_length=50)
    errors += [e.replace("Password", "New password") for e in result['errors']]

    if errors:
        raise ValidationError("Validation failed", errors)

    if new_password == current_password:
        raise ValidationError("New password must be different from current password")

    return {'current_password': current_password, 'new_password': new_password}
