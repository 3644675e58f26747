"""Profile endpoints for the signed-in student."""
from flask import Blueprint, g, request

from attendance_api.security.middleware import guard_protected_request
from attendance_api.services.auth_service import AuthService
from attendance_api.services.user_service import UserService
from attendance_api.utils.helpers import success_response
from attendance_api.utils.validators import (
    validate_change_password_payload, validate_profile_payload
)

users_bp = Blueprint("users", __name__)
users_bp.before_request(guard_protected_request)


@users_bp.route("/profile", methods=["GET"])
def get_profile():
    return success_response(data=g.current_user.to_dict(), message="Profile retrieved successfully")


@users_bp.route("/profile", methods=["PUT"])
def update_profile():
    fields = validate_profile_payload(request.get_json(silent=True))
    user = UserService.update_profile(g.current_user, fields)
    return success_response(data=user.to_dict(), message="Profile updated successfully")


@users_bp.route("/change-password", methods=["POST"])
def change_password():
    fields = validate_change_password_payload(request.get_json(silent=True))
    UserService.change_password(g.current_user, fields["current_password"], fields["new_password"])
    return success_response(message="Password changed successfully")


@users_bp.route("/deactivate", methods=["POST"])
def deactivate():
    """Soft-delete the account."""
    UserService.deactivate(g.current_user)
    return success_response(message="Account deactivated successfully")


@users_bp.route("/logout", methods=["POST"])
def logout():
    # Tokens are stateless; the client discards its copy
    return success_response(message="Logged out successfully")


@users_bp.route("/refresh-token", methods=["POST"])
def refresh_token():
    result = AuthService.refresh_token(g.current_user)
    return success_response(data=result, message="Token refreshed successfully")
