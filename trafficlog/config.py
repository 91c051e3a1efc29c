"""
Configuration Module for the trafficlog Application

This module defines configuration classes for different environments:
- DevelopmentConfig: Local development with SQLite
- ProductionConfig: Production deployment with PostgreSQL
- TestingConfig: Automated testing configuration
"""

import os
import sys
from pathlib import Path


def _env_flag(name, default):
    return os.environ.get(name, str(default)).strip().lower() in ('1', 'true', 'yes', 'on')


def _env_list(name, default):
    raw = os.environ.get(name)
    if not raw:
        return tuple(default)
    return tuple(part.strip() for part in raw.split(',') if part.strip())


class Config:
    """Base configuration with common settings"""

    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Database configuration
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Make database connections more resilient in production (stale connections,
    # temporary network blips). Safe defaults for all environments.
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_pre_ping": True,
        "pool_recycle": 300,
    }

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # Request tracking
    ANALYTICS_ENABLED = _env_flag('ANALYTICS_ENABLED', True)
    ANALYTICS_SKIP_PREFIXES = _env_list('ANALYTICS_SKIP_PREFIXES', ('/static/',))

    # Access gate for the Microsoft Graph Connectors crawler
    ACCESS_GATE_ENABLED = _env_flag('ACCESS_GATE_ENABLED', True)
    ACCESS_GATE_BLOCKED_PATHS = _env_list(
        'ACCESS_GATE_BLOCKED_PATHS',
        ('/RequestDashboard', '/TestApi', '/Privacy', '/Error'),
    )
    ACCESS_GATE_BLOCKED_PREFIXES = _env_list(
        'ACCESS_GATE_BLOCKED_PREFIXES',
        ('/lib/', '/css/', '/js/'),
    )

    # Dashboard
    DASHBOARD_WINDOW_HOURS = int(os.environ.get('DASHBOARD_WINDOW_HOURS', 24))
    DASHBOARD_PAGE_SIZE = int(os.environ.get('DASHBOARD_PAGE_SIZE', 50))


class DevelopmentConfig(Config):
    """Development environment configuration"""

    DEBUG = True
    TESTING = False

    # SQLite for development
    # IMPORTANT (Windows): SQLAlchemy sqlite URLs must use forward slashes.
    _project_root = Path(__file__).resolve().parent.parent
    _default_db_path = (_project_root / 'trafficlog.db').resolve()

    _env_db_url = os.environ.get('DATABASE_URL')
    if _env_db_url and _env_db_url.strip().startswith('sqlite:'):
        _env_db_url = _env_db_url.replace('\\', '/')

    SQLALCHEMY_DATABASE_URI = _env_db_url or f"sqlite:///{_default_db_path.as_posix()}"

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG').upper()


class ProductionConfig(Config):
    """Production environment configuration"""

    DEBUG = False
    TESTING = False

    @property
    def SQLALCHEMY_DATABASE_URI(self):
        """
        Production database URI, evaluated when the config object is loaded.

        Render/Heroku provide DATABASE_URL with a postgres:// prefix which
        SQLAlchemy 1.4+ rejects, so it is rewritten to postgresql://.
        """
        db_uri = os.environ.get('DATABASE_URL')

        if not db_uri:
            print('FATAL: DATABASE_URL not set in environment', file=sys.stderr)
            return None

        if db_uri.startswith('postgres://'):
            db_uri = 'postgresql://' + db_uri[len('postgres://'):]

        return db_uri


class TestingConfig(Config):
    """Testing environment configuration"""

    TESTING = True
    DEBUG = True

    # In-memory SQLite for fast testing
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SECRET_KEY = 'test-secret-key'
    LOG_LEVEL = 'DEBUG'


# Configuration dictionary for easy access
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
