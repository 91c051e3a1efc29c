"""Dashboard statistics over the request log."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from trafficlog.domain import ClientCategory, RequestRecord
from trafficlog.services.analytics.store import RequestLogStore


logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)
DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 500
TOP_N = 10


@dataclass(frozen=True)
class DashboardStats:
    recent_requests: list[RequestRecord] = field(default_factory=list)
    category_counts: dict[ClientCategory, int] = field(default_factory=dict)
    top_clients: list[tuple[str, int]] = field(default_factory=list)
    top_paths: list[tuple[str, int]] = field(default_factory=list)
    total_requests: int = 0
    average_processing_time_ms: float = 0.0

    @classmethod
    def empty(cls) -> 'DashboardStats':
        return cls()

    def to_dict(self) -> dict:
        return {
            'recent_requests': [record.to_dict() for record in self.recent_requests],
            'category_counts': {category.label: count for category, count in self.category_counts.items()},
            'top_clients': [{'client': name, 'count': count} for name, count in self.top_clients],
            'top_paths': [{'path': path, 'count': count} for path, count in self.top_paths],
            'total_requests': self.total_requests,
            'average_processing_time_ms': self.average_processing_time_ms,
        }


class DashboardAggregator:
    """Read-only statistics for the request dashboard."""

    def __init__(self, store: RequestLogStore):
        self.store = store

    def aggregate(
        self,
        *,
        window: timedelta = DEFAULT_WINDOW,
        page: int = 1,
        page_size: int = DEFAULT_PAGE_SIZE,
        now: datetime | None = None,
    ) -> DashboardStats:
        page = max(1, int(page))
        page_size = max(1, min(int(page_size), MAX_PAGE_SIZE))
        now = now or datetime.now(timezone.utc)

        try:
            recent = self.store.recent(offset=(page - 1) * page_size, limit=page_size)
            summary = self.store.summarize(now - window, now, limit=TOP_N)
        except Exception:
            logger.error('Error loading request dashboard data', exc_info=True)
            return DashboardStats.empty()

        return DashboardStats(
            recent_requests=recent,
            category_counts=dict(summary.category_counts),
            top_clients=list(summary.top_clients),
            top_paths=list(summary.top_paths),
            total_requests=summary.total_requests,
            average_processing_time_ms=summary.average_processing_time_ms,
        )
