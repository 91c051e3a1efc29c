"""Persistence port for request records and its SQLAlchemy implementation."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import func, insert, select

from trafficlog.domain import ClientCategory, RequestRecord
from trafficlog.extensions import db
from trafficlog.models import RequestLog


class StoreError(Exception):
    """Raised when the store cannot read or write records."""


@dataclass(frozen=True)
class WindowSummary:
    """Aggregates over the records of one time window."""

    category_counts: dict[ClientCategory, int] = field(default_factory=dict)
    top_clients: list[tuple[str, int]] = field(default_factory=list)
    top_paths: list[tuple[str, int]] = field(default_factory=list)
    total_requests: int = 0
    average_processing_time_ms: float = 0.0


class RequestLogStore(ABC):
    """Append-only store of request records.

    Implementations must make each ``append`` atomic on its own; no ordering
    across concurrent appends is required.
    """

    @abstractmethod
    def append(self, record: RequestRecord) -> RequestRecord:
        """Persist ``record`` and return it with its assigned id.

        Raises:
            StoreError: If the record could not be written.
        """

    @abstractmethod
    def recent(self, *, offset: int = 0, limit: int = 50) -> list[RequestRecord]:
        """Return records ordered by timestamp, newest first."""

    @abstractmethod
    def summarize(self, start: datetime, end: datetime, *, limit: int = 10) -> WindowSummary:
        """Aggregate the records whose timestamp lies in ``[start, end]``.

        Top lists hold at most ``limit`` entries ordered by count descending,
        then by value ascending. Empty client names are not ranked.
        """


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class SQLAlchemyRequestLogStore(RequestLogStore):
    """Store backed by the ``request_logs`` table of the app database.

    Must be used inside an application context.
    """

    def __init__(self, database=None):
        self._db = database or db

    def append(self, record: RequestRecord) -> RequestRecord:
        payload = RequestLog.payload_for(record)
        # Engine-level transaction keeps the insert independent of the request's ORM session.
        try:
            with self._db.engine.begin() as conn:
                result = conn.execute(insert(RequestLog.__table__).values(**payload))
                new_id = result.inserted_primary_key[0] if result.inserted_primary_key else None
        except Exception as exc:
            raise StoreError(f'Failed to save request log: {exc}') from exc
        return record.with_id(new_id) if new_id is not None else record

    def recent(self, *, offset: int = 0, limit: int = 50) -> list[RequestRecord]:
        table = RequestLog.__table__
        stmt = (
            select(table)
            .order_by(table.c.timestamp.desc(), table.c.id.desc())
            .offset(max(0, int(offset)))
            .limit(max(0, int(limit)))
        )
        return self._fetch(stmt)

    def summarize(self, start: datetime, end: datetime, *, limit: int = 10) -> WindowSummary:
        table = RequestLog.__table__
        in_window = (
            table.c.timestamp >= _naive_utc(start),
            table.c.timestamp <= _naive_utc(end),
        )
        hits = func.count(table.c.id)

        totals_stmt = select(hits, func.avg(table.c.processing_time_ms)).where(*in_window)
        categories_stmt = (
            select(table.c.category, hits)
            .where(*in_window)
            .group_by(table.c.category)
        )
        clients_stmt = (
            select(table.c.detected_client, hits)
            .where(*in_window)
            .where(table.c.detected_client.is_not(None))
            .where(table.c.detected_client != '')
            .group_by(table.c.detected_client)
            .order_by(hits.desc(), table.c.detected_client.asc())
            .limit(limit)
        )
        paths_stmt = (
            select(table.c.path, hits)
            .where(*in_window)
            .group_by(table.c.path)
            .order_by(hits.desc(), table.c.path.asc())
            .limit(limit)
        )

        try:
            with self._db.engine.connect() as conn:
                total, average = conn.execute(totals_stmt).one()
                category_rows = conn.execute(categories_stmt).all()
                client_rows = conn.execute(clients_stmt).all()
                path_rows = conn.execute(paths_stmt).all()
        except Exception as exc:
            raise StoreError(f'Failed to summarize request logs: {exc}') from exc

        category_counts: dict[ClientCategory, int] = {}
        for value, count in category_rows:
            try:
                category = ClientCategory(value)
            except ValueError:
                category = ClientCategory.UNKNOWN
            category_counts[category] = category_counts.get(category, 0) + int(count)

        return WindowSummary(
            category_counts=category_counts,
            top_clients=[(name, int(count)) for name, count in client_rows],
            top_paths=[(path, int(count)) for path, count in path_rows],
            total_requests=int(total or 0),
            average_processing_time_ms=float(average or 0.0),
        )

    def _fetch(self, stmt) -> list[RequestRecord]:
        try:
            with self._db.engine.connect() as conn:
                rows = conn.execute(stmt).all()
        except Exception as exc:
            raise StoreError(f'Failed to query request logs: {exc}') from exc
        return [RequestLog.record_from_row(row) for row in rows]
