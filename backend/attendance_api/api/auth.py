"""Registration and login endpoints."""
from flask import Blueprint, request

from attendance_api import limiter
from attendance_api.services.auth_service import AuthService
from attendance_api.utils.helpers import success_response
from attendance_api.utils.validators import validate_login_payload, validate_register_payload

auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/register", methods=["POST"])
@limiter.limit("10 per minute")
def register():
    """Register a student account."""
    fields = validate_register_payload(request.get_json(silent=True))
    result = AuthService.register(fields)
    return success_response(data=result, message="User registered successfully", status_code=201)


@auth_bp.route("/login", methods=["POST"])
@limiter.limit("5 per minute")
def login():
    """Email/password login."""
    fields = validate_login_payload(request.get_json(silent=True))
    result = AuthService.login(fields["email"], fields["password"])
    return success_response(data=result, message="Login successful")
