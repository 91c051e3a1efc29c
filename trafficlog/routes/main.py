"""Public pages: landing payload, robots policy and the echo API."""

from datetime import datetime, timezone

from flask import Blueprint, Response, current_app, jsonify, request

from trafficlog.utils.client_ip import extract_client_ip


main_bp = Blueprint('main', __name__)


@main_bp.route('/')
def index():
    return jsonify({
        'service': 'trafficlog',
        'dashboard': '/RequestDashboard',
        'timestamp': datetime.now(timezone.utc).isoformat(),
    })


@main_bp.route('/robots.txt')
def robots():
    """Robots policy mirroring the access gate rules."""

    lines = ['User-agent: GraphConnectors']
    for path in current_app.config.get('ACCESS_GATE_BLOCKED_PATHS', ()):
        lines.append(f'Disallow: {path}')
    for prefix in current_app.config.get('ACCESS_GATE_BLOCKED_PREFIXES', ()):
        lines.append(f'Disallow: {prefix}')
    lines.append('Allow: /')
    lines.append('')
    lines.append('User-agent: *')
    lines.append('Allow: /')
    lines.append('')

    return Response('\n'.join(lines), mimetype='text/plain')


def _echo(message):
    return jsonify({
        'message': message,
        'timestamp': datetime.now(timezone.utc).isoformat(),
        'userAgent': request.headers.get('User-Agent', ''),
        'ipAddress': extract_client_ip(request.headers, request.remote_addr),
        'method': request.method,
        'path': request.path,
    })


@main_bp.route('/TestApi', methods=['GET'])
def test_api():
    return _echo('Hello from the API!')


@main_bp.route('/TestApi', methods=['POST'])
def test_api_post():
    return _echo('POST request received')
