"""Testing configuration."""
from datetime import timedelta

from .base import BaseConfig


class TestingConfig(BaseConfig):
    """Testing configuration class."""

    DEBUG = False
    TESTING = True
    SECRET_KEY = 'test-secret-key'

    # Database (in-memory SQLite for testing)
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # JWT Configuration
    JWT_SECRET_KEY = 'test-jwt-secret-key-with-enough-length'
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=5)

    # Rate Limiting (disabled for testing)
    RATELIMIT_ENABLED = False

    ADMIN_OVERRIDE_KEY = 'test-admin-override'

    # Toggles pinned so the suite does not depend on the environment
    ENABLE_VPN_DETECTION = False
    ENABLE_NETWORK_TYPE_CHECK = False
    ENABLE_PRECISION_CHECK = True
    ENABLE_REPEATING_ZERO_CHECK = True
    ENABLE_MOCK_HEADER_CHECK = True
    ENABLE_GPS_ACCURACY_CHECK = True
    SPOOF_MAX_COORDINATE_PRECISION = 10

    SCHOOL_LATITUDE = -8.1575
    SCHOOL_LONGITUDE = 113.722778
    SCHOOL_RADIUS_KM = 0.1
    SCHOOL_START_HOUR = 7
    SCHOOL_START_MINUTE = 0
    LATE_THRESHOLD_MINUTES = 30
    SCHOOL_TIMEZONE = 'Asia/Jakarta'

    # Logging
    LOG_LEVEL = 'WARNING'
