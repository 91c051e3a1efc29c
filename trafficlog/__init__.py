"""
Flask Application Factory

This module implements the application factory pattern for creating
Flask application instances with different configurations.
"""

import logging
import os
from collections.abc import Mapping

from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from trafficlog.config import config
from trafficlog.extensions import db, migrate


def _safe_log(app, level: str, message: str, *args, **kwargs) -> None:
    """Log without risking startup due to logger misconfiguration."""
    try:
        logger = getattr(app.logger, level)
        logger(message, *args, **kwargs)
    except Exception:
        return


def configure_logging(app) -> None:
    """Apply LOG_LEVEL to the app logger.

    The app logger is the ``trafficlog`` package logger, so every module
    logger below it shares its handler and level.
    """
    level_name = str(app.config.get('LOG_LEVEL') or 'INFO').upper()
    app.logger.setLevel(getattr(logging, level_name, logging.INFO))


def create_app(config_name='default', overrides=None):
    """
    Application factory function

    Args:
        config_name (str | Mapping): Configuration name ('development',
            'production', 'testing'), or a mapping of overrides applied on
            top of the testing configuration.
        overrides (Mapping | None): Extra config values applied last.

    Returns:
        Flask: Configured Flask application instance
    """

    if isinstance(config_name, Mapping):
        overrides = {**config_name, **(overrides or {})}
        config_name = 'testing'

    # Normalize config name
    config_name = (config_name or 'default').lower()

    app = Flask(__name__)

    # Instantiate the config object so @property values (like
    # ProductionConfig.SQLALCHEMY_DATABASE_URI) are evaluated correctly.
    cfg = config.get(config_name) or config['default']
    app.config.from_object(cfg())
    if overrides:
        app.config.update(overrides)

    configure_logging(app)

    if config_name == 'production':
        if not app.config.get('SECRET_KEY'):
            app.logger.error('Production requires SECRET_KEY to be set via environment variable')
            raise RuntimeError('Missing SECRET_KEY in production')
        if not app.config.get('SQLALCHEMY_DATABASE_URI'):
            app.logger.error('Production requires DATABASE_URL (SQLALCHEMY_DATABASE_URI) to be set')
            raise RuntimeError('Missing DATABASE_URL in production')
    elif not app.config.get('SECRET_KEY'):
        app.config['SECRET_KEY'] = os.urandom(32)
        app.logger.warning('SECRET_KEY was missing; generated an ephemeral key for this process.')

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so metadata is populated for migrations and create_all.
    from trafficlog import models  # noqa: F401

    register_request_hooks(app)
    register_blueprints(app)
    register_error_handlers(app)
    register_cli(app)

    _safe_log(app, 'info', 'trafficlog initialized with config: %s', config_name)
    return app


def register_request_hooks(app):
    """Attach the access gate and the request tracker.

    Order matters: the gate's before_request hook must run first so denied
    requests are answered before tracking starts.
    """

    from trafficlog.services.analytics.access_gate import register_access_gate
    from trafficlog.services.analytics.dashboard import DashboardAggregator
    from trafficlog.services.analytics.store import SQLAlchemyRequestLogStore
    from trafficlog.services.analytics.tracking import RequestTracker

    store = SQLAlchemyRequestLogStore(db)

    register_access_gate(app)
    RequestTracker(store, logger=logging.getLogger('trafficlog.requests')).init_app(app)
    app.extensions['dashboard_aggregator'] = DashboardAggregator(store)


def register_blueprints(app):
    """Register Flask blueprints"""

    from trafficlog.routes.main import main_bp
    from trafficlog.routes.dashboard import dashboard_bp
    from trafficlog.routes.health import health_bp

    app.register_blueprint(main_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(health_bp)  # No prefix - accessible at /health


def register_error_handlers(app):
    """Register JSON error handlers for HTTP errors"""

    @app.errorhandler(HTTPException)
    def http_error(error):
        return jsonify({'error': error.name, 'status': error.code}), error.code

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors"""
        app.logger.exception('Unhandled exception (500): %s', error)
        db.session.rollback()
        return jsonify({'error': 'Internal Server Error', 'status': 500}), 500


def register_cli(app):
    from trafficlog.cli import classify_ua_command, init_db_command, traffic_stats_command

    app.cli.add_command(init_db_command)
    app.cli.add_command(classify_ua_command)
    app.cli.add_command(traffic_stats_command)
