"""Access gate for the Microsoft Graph Connectors crawler.

The crawler may fetch ``/robots.txt`` and the root page; everything listed
in the blocked paths or under the blocked prefixes gets a fixed 403.
"""

from __future__ import annotations

import logging
from typing import Iterable

from flask import Response, current_app, request


logger = logging.getLogger(__name__)

BLOCKED_CRAWLER_MARKER = 'graphconnectors'

BLOCKED_USER_AGENT = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko; GraphConnectors) Chrome/76.0.3809.132 Safari/537.36'
)

DEFAULT_BLOCKED_PATHS = ('/RequestDashboard', '/TestApi', '/Privacy', '/Error')
DEFAULT_BLOCKED_PREFIXES = ('/lib/', '/css/', '/js/')

ROBOTS_PATH = '/robots.txt'

DENIAL_STATUS = 403
DENIAL_MESSAGE = (
    'Access denied. This resource is not available to Microsoft Graph Connectors. '
    'Please check robots.txt for allowed paths.'
)


def is_blocked_crawler(user_agent: str | None) -> bool:
    if not user_agent:
        return False
    ua = user_agent.lower()
    return BLOCKED_CRAWLER_MARKER in ua or ua == BLOCKED_USER_AGENT.lower()


def is_path_blocked(
    path: str,
    *,
    blocked_paths: Iterable[str] = DEFAULT_BLOCKED_PATHS,
    blocked_prefixes: Iterable[str] = DEFAULT_BLOCKED_PREFIXES,
) -> bool:
    if path == '/':
        return False
    p = path.lower()
    if p in {b.lower() for b in blocked_paths}:
        return True
    return p.startswith(tuple(prefix.lower() for prefix in blocked_prefixes))


def should_block(
    path: str | None,
    user_agent: str | None,
    *,
    blocked_paths: Iterable[str] = DEFAULT_BLOCKED_PATHS,
    blocked_prefixes: Iterable[str] = DEFAULT_BLOCKED_PREFIXES,
) -> bool:
    """Return True when the request must be answered with the denial response."""

    path = path or '/'
    if path.lower().startswith(ROBOTS_PATH):
        return False
    if not is_blocked_crawler(user_agent):
        return False
    return is_path_blocked(path, blocked_paths=blocked_paths, blocked_prefixes=blocked_prefixes)


def denial_response() -> Response:
    return Response(DENIAL_MESSAGE, status=DENIAL_STATUS, mimetype='text/plain')


def register_access_gate(app) -> None:
    """Install the gate as a ``before_request`` hook.

    Must be registered before the request tracker so denied requests never
    reach tracking or the view.
    """

    @app.before_request
    def _enforce_access_gate():
        if not current_app.config.get('ACCESS_GATE_ENABLED', True):
            return None

        try:
            path = request.path or '/'
            user_agent = request.headers.get('User-Agent') or ''
            blocked = should_block(
                path,
                user_agent,
                blocked_paths=current_app.config.get('ACCESS_GATE_BLOCKED_PATHS', DEFAULT_BLOCKED_PATHS),
                blocked_prefixes=current_app.config.get('ACCESS_GATE_BLOCKED_PREFIXES', DEFAULT_BLOCKED_PREFIXES),
            )
        except Exception:
            logger.warning('Access gate check failed; allowing request', exc_info=True)
            return None

        if blocked:
            logger.warning(
                'Blocked request from Microsoft Graph Connectors to %s. User-Agent: %s',
                path,
                user_agent,
            )
            return denial_response()

        if is_blocked_crawler(user_agent):
            logger.info('Allowed request from Microsoft Graph Connectors to %s', path)
        return None
