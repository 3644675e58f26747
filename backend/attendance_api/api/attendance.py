"""Attendance API endpoints behind the auth, network and geofence gates."""
from flask import Blueprint, current_app, g, request

from attendance_api.security.middleware import (
    apply_mobile_security_headers, enforce_location_policy,
    guard_protected_request, require_user_agent
)
from attendance_api.services.attendance_service import AttendanceService
from attendance_api.utils.helpers import pagination_meta, success_response
from attendance_api.utils.validators import parse_location_payload

attendance_bp = Blueprint('attendance', __name__)
attendance_bp.before_request(guard_protected_request)
attendance_bp.before_request(require_user_agent)
attendance_bp.after_request(apply_mobile_security_headers)


def _record_response(record) -> dict:
    data = record.to_dict()
    data['user'] = g.current_user.to_public_dict()
    return data


def _gated_location() -> dict:
    location = parse_location_payload(request.get_json(silent=True))
    enforce_location_policy(location['latitude'], location['longitude'])
    return location


@attendance_bp.route('/checkin', methods=['POST'])
def check_in():
    """Check in for today."""
    location = _gated_location()
    record = AttendanceService.check_in(g.current_user.id, location)
    return success_response(data=_record_response(record), message='Check in successful')


@attendance_bp.route('/checkout', methods=['POST'])
def check_out():
    """Check out of today's record."""
    location = _gated_location()
    record = AttendanceService.check_out(g.current_user.id, location)
    return success_response(data=_record_response(record), message='Check out successful')


@attendance_bp.route('/today', methods=['GET'])
def today():
    record = AttendanceService.get_today(g.current_user.id)
    if record is None:
        return success_response(data=None, message='No attendance record for today')
    return success_response(data=_record_response(record), message="Today's attendance retrieved")


@attendance_bp.route('/history', methods=['GET'])
def history():
    """Paginated history, newest first."""
    default_limit = current_app.config.get('DEFAULT_PAGE_SIZE', 10)
    max_limit = current_app.config.get('MAX_PAGE_SIZE', 100)

    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', default_limit, type=int)
    if page < 1:
        page = 1
    if limit < 1 or limit > max_limit:
        limit = default_limit

    records, total = AttendanceService.get_history(
        g.current_user.id, limit=limit, offset=(page - 1) * limit
    )
    return success_response(
        data={
            'history': [record.to_history_dict() for record in records],
            'pagination': pagination_meta(page, limit, total)
        },
        message='Attendance history retrieved'
    )


@attendance_bp.route('/stats', methods=['GET'])
def stats():
    data = AttendanceService.get_stats(g.current_user.id)
    return success_response(data=data, message='Attendance statistics retrieved')
