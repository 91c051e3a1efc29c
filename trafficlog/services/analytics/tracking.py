"""Request tracking.

Every request that passes the access gate is timed, classified and written
to the request log store once the view has produced its response.

Tracking fails open: a fault in classification, record assembly,
persistence or logging is logged and dropped, and the response produced by
the view is returned untouched. Exceptions raised by the view itself are
never caught here; Flask's own error handling deals with them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping

from flask import current_app, g, request

from trafficlog.domain import RequestRecord
from trafficlog.services.analytics.classifier import Classification, classify_user_agent
from trafficlog.services.analytics.store import RequestLogStore
from trafficlog.utils.client_ip import extract_client_ip


logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_PLACEHOLDER = 'Unknown'


def _read_header(headers: Mapping[str, str], name: str) -> str | None:
    try:
        return headers.get(name) or None
    except Exception:
        logger.warning('Could not read %s header', name, exc_info=True)
        return None


@dataclass(frozen=True)
class TrackingState:
    started_at: float
    user_agent: str | None
    classification: Classification


@dataclass(frozen=True)
class PersistResult:
    ok: bool
    record: RequestRecord | None = None
    error: Exception | None = None


class RequestTracker:
    """Times requests and persists one :class:`RequestRecord` per response.

    Example:
        tracker = RequestTracker(SQLAlchemyRequestLogStore())
        tracker.init_app(app)
    """

    def __init__(
        self,
        store: RequestLogStore,
        *,
        classifier: Callable[[str | None], Classification] = classify_user_agent,
        logger: logging.Logger | None = None,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.store = store
        self.classifier = classifier
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock

    def init_app(self, app) -> None:
        app.extensions['request_tracker'] = self
        app.before_request(self._before_request)
        app.after_request(self._after_request)

    # Plain operations (framework independent)

    def start(self, user_agent: str | None) -> TrackingState:
        started_at = self._clock()
        try:
            classification = self.classifier(user_agent)
        except Exception:
            self.logger.error('User agent classification failed', exc_info=True)
            classification = classify_user_agent(None)
        return TrackingState(started_at=started_at, user_agent=user_agent, classification=classification)

    def build_record(
        self,
        state: TrackingState,
        *,
        method: str,
        path: str,
        status_code: int,
        headers: Mapping[str, str] | None = None,
        remote_addr: str | None = None,
        query_string: str | None = None,
        now: datetime | None = None,
    ) -> RequestRecord:
        elapsed_ms = (self._clock() - state.started_at) * 1000
        headers = headers or {}
        return RequestRecord.build(
            timestamp=now or datetime.now(timezone.utc),
            method=method,
            path=path or '/',
            ip_address=extract_client_ip(headers, remote_addr),
            user_agent=state.user_agent or None,
            category=state.classification.category,
            detected_client=state.classification.detected_client,
            status_code=status_code,
            processing_time_ms=elapsed_ms,
            referer=_read_header(headers, 'Referer'),
            query_string=query_string or None,
        )

    def persist(self, record: RequestRecord) -> PersistResult:
        try:
            saved = self.store.append(record)
        except Exception as exc:
            self.logger.error('Failed to save request log to database', exc_info=True)
            return PersistResult(ok=False, record=record, error=exc)
        return PersistResult(ok=True, record=saved)

    def emit(self, record: RequestRecord) -> None:
        try:
            self.logger.info(
                'Request tracked: %s %s - %s (%s) - %s - %sms',
                record.method,
                record.path,
                record.category.label,
                record.detected_client or UNKNOWN_CLIENT_PLACEHOLDER,
                record.status_code,
                record.processing_time_ms,
            )
        except Exception:
            logger.error('Failed to emit request log line', exc_info=True)

    def finish(self, state: TrackingState, **request_details) -> PersistResult:
        """Build, persist and log the record for a completed request."""

        try:
            record = self.build_record(state, **request_details)
        except Exception as exc:
            self.logger.error('Error in request tracking', exc_info=True)
            return PersistResult(ok=False, error=exc)

        result = self.persist(record)
        self.emit(result.record or record)
        return result

    # Flask hooks

    def _should_track(self) -> bool:
        if not current_app.config.get('ANALYTICS_ENABLED', True):
            return False
        path = request.path or '/'
        skip = tuple(current_app.config.get('ANALYTICS_SKIP_PREFIXES') or ())
        return not (skip and path.startswith(skip))

    def _before_request(self):
        g.request_tracking = None
        try:
            if not self._should_track():
                return None
            g.request_tracking = self.start(request.headers.get('User-Agent'))
        except Exception:
            # Never block traffic because of tracking.
            self.logger.error('Error in request tracking', exc_info=True)
            g.request_tracking = None
        return None

    def _after_request(self, response):
        state = g.pop('request_tracking', None)
        if state is None:
            return response

        try:
            details = {
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'headers': request.headers,
                'remote_addr': request.remote_addr,
                'query_string': request.query_string.decode('utf-8', 'replace'),
            }
        except Exception:
            self.logger.error('Error in request tracking', exc_info=True)
            return response

        self.finish(state, **details)
        return response
