"""Development helper endpoints."""
from flask import Blueprint
from flask_jwt_extended import jwt_required

from attendance_api.services.user_service import UserService
from attendance_api.utils.helpers import success_response

testing_bp = Blueprint("testing", __name__)


@testing_bp.route("/users", methods=["GET"])
@jwt_required(optional=True)
def list_users():
    """List active users."""
    users = UserService.list_active_users()
    return success_response(
        data={"users": [user.to_dict() for user in users], "total": len(users)},
        message="Users retrieved successfully"
    )
