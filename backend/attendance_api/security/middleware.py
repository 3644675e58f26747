"""Request hooks wiring auth and the gate pipelines into Flask."""
import secrets
import uuid

from flask import current_app, g, request
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from attendance_api.security.gates import NetworkContext
from attendance_api.security.network_gates import resolve_client_ip
from attendance_api.services.auth_service import AuthService
from attendance_api.utils.errors import NotFoundOrInactive, ValidationError

MOBILE_SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'X-XSS-Protection': '1; mode=block',
    'Strict-Transport-Security': 'max-age=31536000; includeSubDomains',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Content-Security-Policy': "default-src 'self'",
    'X-Mobile-API': 'true',
    'X-GPS-Required': 'true',
    'X-Location-Based': 'true',
}


def _number(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return None


def context_from_request() -> NetworkContext:
    """Build the gate context for the current request."""
    headers = request.headers
    latitude = longitude = None

    body = request.get_json(silent=True) if request.is_json else None
    if isinstance(body, dict):
        latitude = _number(body.get('latitude'))
        longitude = _number(body.get('longitude'))

    return NetworkContext(
        path=request.path,
        client_ip=resolve_client_ip(headers, request.remote_addr),
        user_agent=headers.get('User-Agent', ''),
        network_type=headers.get('X-Network-Type', ''),
        wifi_ssid=headers.get('X-WiFi-SSID', ''),
        carrier=headers.get('X-Carrier', ''),
        admin_key=headers.get('X-Admin-Override', ''),
        admin_override=bool(g.get('admin_override', False)),
        headers=dict(headers.items()),
        latitude=latitude,
        longitude=longitude
    )


def init_request_state():
    """Assign a request id and flag a valid admin override before any gate runs."""
    g.request_id = uuid.uuid4().hex
    g.admin_override = False
    g.network_security = None
    g.client_ip = None

    override_key = current_app.extensions['attendance_api']['policies'].network.admin_override_key
    supplied = request.headers.get('X-Admin-Override', '')
    if override_key and supplied and secrets.compare_digest(supplied.encode(), override_key.encode()):
        g.admin_override = True


def require_active_user():
    """Validate the bearer token and load the active user into ``g``."""
    verify_jwt_in_request()
    identity = get_jwt_identity()
    try:
        user_id = int(identity)
    except (TypeError, ValueError):
        raise NotFoundOrInactive("Invalid token claims")

    g.current_user = AuthService.get_active_user(user_id)
    return g.current_user


def enforce_network_policy():
    """Run the network gate and spoof detector for the current request."""
    pipeline = current_app.extensions['attendance_api']['network_pipeline']
    context = context_from_request()
    result = pipeline.enforce(context)

    g.client_ip = context.client_ip
    g.network_security = result.tag

    current_app.logger.debug(
        'Network info: ip=%s ua=%s type=%s ssid=%s carrier=%s device=%s app=%s',
        context.client_ip, context.user_agent, context.network_type,
        context.wifi_ssid, context.carrier,
        context.header('X-Device-ID'), context.header('X-App-Version')
    )
    return result


def enforce_location_policy(latitude: float, longitude: float):
    """Run the geofence gates against a parsed check-in/check-out body."""
    pipeline = current_app.extensions['attendance_api']['location_pipeline']
    context = context_from_request().with_location(latitude, longitude)
    return pipeline.enforce(context)


def require_user_agent():
    if request.method == 'OPTIONS':
        return None
    if not request.headers.get('User-Agent', '').strip():
        raise ValidationError("User-Agent header is required")


def guard_protected_request():
    """AuthGate followed by NetworkGate, for blueprint ``before_request``."""
    if request.method == 'OPTIONS':
        return None
    require_active_user()
    enforce_network_policy()
    return None


def apply_response_headers(response):
    request_id = g.get('request_id')
    if request_id:
        response.headers['X-Request-ID'] = request_id

    tag = g.get('network_security')
    if tag:
        response.headers['X-Network-Security'] = tag
        if tag == 'validated':
            response.headers['X-Client-IP'] = g.get('client_ip', '')
            response.headers['X-Security-Level'] = 'high'
    return response


def apply_mobile_security_headers(response):
    for header, value in MOBILE_SECURITY_HEADERS.items():
        response.headers[header] = value
    return response
