"""Base configuration shared by every environment."""
import os
from datetime import timedelta


def _env_int(key: str, default: int) -> int:
    value = os.environ.get(key)
    if value:
        try:
            return int(value)
        except ValueError:
            pass
    return default


def _env_float(key: str, default: float) -> float:
    value = os.environ.get(key)
    if value:
        try:
            return float(value)
        except ValueError:
            pass
    return default


def _env_bool(key: str, default: bool) -> bool:
    value = os.environ.get(key)
    if value is None or value == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


class BaseConfig:
    """Base configuration class."""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = False

    # JWT Configuration
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or 'jwt-secret-key-change-in-production'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=24)
    JWT_ALGORITHM = 'HS256'

    # CORS
    CORS_ORIGINS = ["*"]

    # Rate Limiting
    RATELIMIT_STORAGE_URI = os.environ.get('RATELIMIT_STORAGE_URL') or 'memory://'
    RATELIMIT_DEFAULT = "200 per day, 50 per hour"

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FILE = os.environ.get('LOG_FILE', 'logs/app.log')

    # =================== SCHOOL POLICY ===================
    SCHOOL_LATITUDE = _env_float('SCHOOL_LATITUDE', -8.1575)
    SCHOOL_LONGITUDE = _env_float('SCHOOL_LONGITUDE', 113.722778)
    SCHOOL_RADIUS_KM = _env_float('SCHOOL_RADIUS', 0.1)  # 100 meters

    SCHOOL_START_HOUR = _env_int('SCHOOL_START_HOUR', 7)
    SCHOOL_START_MINUTE = _env_int('SCHOOL_START_MINUTE', 0)
    SCHOOL_END_HOUR = _env_int('SCHOOL_END_HOUR', 15)
    SCHOOL_END_MINUTE = _env_int('SCHOOL_END_MINUTE', 30)
    LATE_THRESHOLD_MINUTES = _env_int('LATE_THRESHOLD', 30)
    SCHOOL_TIMEZONE = os.environ.get('SCHOOL_TIMEZONE', 'Asia/Jakarta')

    # Coarse in-country pre-filter (south, north, west, east)
    COUNTRY_NAME = 'Indonesia'
    COUNTRY_BOUNDS = (-11.0, 6.0, 95.0, 141.0)

    # =================== NETWORK POLICY ===================
    NETWORK_GATE_EXEMPT_PATHS = (
        '/api/v1/health',
        '/api/v1/auth/login',
        '/api/v1/auth/register',
    )

    # Disabled when unset
    ADMIN_OVERRIDE_KEY = os.environ.get('ADMIN_OVERRIDE_KEY')

    ALLOWED_IP_RANGES = (
        '10.0.0.0/8',
        '172.16.0.0/12',
        '192.168.0.0/16',
        '127.0.0.0/8',
        '103.0.0.0/8',
        '114.0.0.0/8',
        '202.0.0.0/8',
        '103.156.71.94',
        '203.78.113.253',
    )

    ENABLE_VPN_DETECTION = _env_bool('ENABLE_VPN_DETECTION', False)
    VPN_HEADERS = (
        'X-VPN-Client',
        'X-Forwarded-Proto',
        'X-Proxy-Authorization',
        'Via',
    )
    VPN_USER_AGENT_KEYWORDS = (
        'vpn',
        'proxy',
        'tunnel',
        'nordvpn',
        'expressvpn',
        'cyberghost',
        'protonvpn',
    )
    VPN_MIN_TTL = 50

    ENABLE_NETWORK_TYPE_CHECK = _env_bool('ENABLE_NETWORK_TYPE_CHECK', False)
    ALLOWED_NETWORK_TYPES = ('wifi', 'cellular', '4g', '5g', 'lte', 'ethernet')

    ALLOWED_WIFI_SSIDS = (
        'JTI-3.01',
        'JTI-3.02',
        'JTI-3.03',
        'JTI-3.04',
        'JTI-3.05',
        'anjay',
    )
    WIFI_SSID_PATTERNS = (
        r'^JTI-.*',
        r'^UJIKOM-.*',
    )

    ALLOWED_CARRIERS = (
        'telkomsel',
        'indosat',
        'xl',
        'axis',
        'tri',
        'smartfren',
        'by.u',
    )
    SECURE_CELLULAR_TYPES = ('4g', '5g', 'lte', 'lte-a')

    # =================== SPOOF DETECTION ===================
    # Decimal places beyond this are treated as synthetic coordinates
    SPOOF_MAX_COORDINATE_PRECISION = _env_int('SPOOF_MAX_COORDINATE_PRECISION', 10)
    ENABLE_PRECISION_CHECK = _env_bool('ENABLE_PRECISION_CHECK', True)
    ENABLE_REPEATING_ZERO_CHECK = _env_bool('ENABLE_REPEATING_ZERO_CHECK', True)
    ENABLE_MOCK_HEADER_CHECK = _env_bool('ENABLE_MOCK_HEADER_CHECK', True)
    ENABLE_GPS_ACCURACY_CHECK = _env_bool('ENABLE_GPS_ACCURACY_CHECK', True)
    MOCK_LOCATION_HEADERS = (
        'X-Mock-Location',
        'X-Fake-GPS',
        'X-Location-Spoofed',
    )
    MIN_GPS_ACCURACY_METERS = 1.0

    # Pagination
    DEFAULT_PAGE_SIZE = 10
    MAX_PAGE_SIZE = 100
