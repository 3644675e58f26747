"""Development configuration."""
import os

from .base import BaseConfig


class DevelopmentConfig(BaseConfig):
    """Development configuration class."""

    DEBUG = True
    TESTING = False

    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DEV_DATABASE_URL') or 'sqlite:///attendance_dev.db'
    SQLALCHEMY_ECHO = False

    # Admin override is convenient on a developer laptop
    ADMIN_OVERRIDE_KEY = os.getenv('ADMIN_OVERRIDE_KEY', 'dev-admin-override')

    LOG_LEVEL = 'DEBUG'
