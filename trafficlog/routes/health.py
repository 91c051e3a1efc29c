"""
Health check endpoints for monitoring application and dependencies.

These endpoints are used by:
- Load balancers to route traffic only to healthy instances
- Uptime monitors
"""

from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify
from sqlalchemy import inspect, text

from trafficlog.extensions import db
from trafficlog.models import RequestLog


health_bp = Blueprint('health', __name__)


@health_bp.route('/health')
def health_check():
    """
    Lightweight health check for load balancer probes.

    Does NOT check database connectivity to keep response time low.
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'service': 'trafficlog',
    }), 200


@health_bp.route('/health/ready')
def readiness_check():
    """
    Readiness check including database connectivity and the request log table.
    """
    checks = {
        'application': 'healthy',
        'database': 'unknown',
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }

    status_code = 200

    try:
        db.session.execute(text('SELECT 1'))
        db.session.commit()
        checks['database'] = 'healthy'
    except Exception as exc:
        checks['database'] = 'unhealthy'
        checks['database_error'] = str(exc)
        status_code = 503
        current_app.logger.error('Database health check failed: %s', exc, exc_info=True)
        db.session.rollback()

    if checks['database'] == 'healthy':
        try:
            tables = set(inspect(db.engine).get_table_names())
            if RequestLog.__tablename__ in tables:
                checks['schema'] = 'complete'
            else:
                checks['schema'] = 'incomplete'
                checks['missing_tables'] = [RequestLog.__tablename__]
                status_code = 503
        except Exception as exc:
            checks['schema'] = 'unknown'
            checks['schema_error'] = str(exc)
            current_app.logger.error('Schema health check failed: %s', exc, exc_info=True)

    checks['overall'] = 'healthy' if status_code == 200 else 'unhealthy'

    return jsonify(checks), status_code
