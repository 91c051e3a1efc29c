"""Test configuration and fixtures."""

import os
import tempfile
from collections import Counter
from datetime import datetime
from pathlib import Path

import pytest

from trafficlog import create_app
from trafficlog.extensions import db as _db
from trafficlog.services.analytics.store import RequestLogStore, StoreError, WindowSummary


GRAPH_CONNECTORS_UA = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko; GraphConnectors) Chrome/76.0.3809.132 Safari/537.36'
)

CHROME_UA = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
    '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
)


def rank(values, limit=10):
    """Most frequent values first; equal counts fall back to ascending value."""
    counts = Counter(values)
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))[:limit]


class MemoryRequestLogStore(RequestLogStore):
    """List-backed store for tests that do not need a database."""

    def __init__(self, records=None):
        self.records = list(records or [])

    def append(self, record):
        saved = record.with_id(len(self.records) + 1)
        self.records.append(saved)
        return saved

    def recent(self, *, offset=0, limit=50):
        ordered = sorted(self.records, key=lambda r: r.timestamp, reverse=True)
        return ordered[offset:offset + limit]

    def summarize(self, start: datetime, end: datetime, *, limit=10):
        window = [r for r in self.records if start <= r.timestamp <= end]
        total = len(window)
        return WindowSummary(
            category_counts=dict(Counter(r.category for r in window)),
            top_clients=rank((r.detected_client for r in window if r.detected_client), limit),
            top_paths=rank((r.path for r in window), limit),
            total_requests=total,
            average_processing_time_ms=(
                sum(r.processing_time_ms for r in window) / total if total else 0.0
            ),
        )


class FailingRequestLogStore(RequestLogStore):
    """Store whose every operation fails."""

    def append(self, record):
        raise StoreError('database is down')

    def recent(self, *, offset=0, limit=50):
        raise StoreError('database is down')

    def summarize(self, start, end, *, limit=10):
        raise StoreError('database is down')


@pytest.fixture
def app():
    """Create application for testing."""
    db_fd, db_path = tempfile.mkstemp(suffix='.db')

    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f'sqlite:///{db_path}',
        'SECRET_KEY': 'test-secret-key',
    })

    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()
        _db.engine.dispose()

    os.close(db_fd)
    Path(db_path).unlink(missing_ok=True)


@pytest.fixture
def client(app):
    """Test client for making requests."""
    return app.test_client()


@pytest.fixture
def runner(app):
    """CLI test runner."""
    return app.test_cli_runner()


@pytest.fixture
def tracker(app):
    return app.extensions['request_tracker']


@pytest.fixture
def memory_store():
    return MemoryRequestLogStore()


@pytest.fixture
def failing_store():
    return FailingRequestLogStore()
