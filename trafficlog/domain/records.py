"""Immutable request record shared by the tracker, the store and the dashboard."""

from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from typing import Any

from trafficlog.domain.enums import ClientCategory


METHOD_MAX_LENGTH = 10
PATH_MAX_LENGTH = 2000
IP_ADDRESS_MAX_LENGTH = 45
USER_AGENT_MAX_LENGTH = 1000
DETECTED_CLIENT_MAX_LENGTH = 100
REFERER_MAX_LENGTH = 2000
QUERY_STRING_MAX_LENGTH = 1000


def _clip(value: str | None, limit: int) -> str | None:
    if value is None:
        return None
    value = str(value)
    if not value:
        return None
    return value[:limit]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


@dataclass(frozen=True)
class RequestRecord:
    timestamp: datetime
    method: str
    path: str
    category: ClientCategory
    status_code: int
    processing_time_ms: int
    ip_address: str | None = None
    user_agent: str | None = None
    detected_client: str | None = None
    referer: str | None = None
    query_string: str | None = None
    id: int | None = None

    @classmethod
    def build(
        cls,
        *,
        timestamp: datetime,
        method: str | None,
        path: str | None,
        category: ClientCategory | None,
        status_code: int,
        processing_time_ms: float | int,
        ip_address: str | None = None,
        user_agent: str | None = None,
        detected_client: str | None = None,
        referer: str | None = None,
        query_string: str | None = None,
        id: int | None = None,
    ) -> 'RequestRecord':
        """Create a record, truncating over-long strings instead of rejecting them."""

        return cls(
            id=id,
            timestamp=_as_utc(timestamp),
            method=(method or 'GET')[:METHOD_MAX_LENGTH],
            path=(path or '/')[:PATH_MAX_LENGTH],
            category=category if isinstance(category, ClientCategory) else ClientCategory.UNKNOWN,
            status_code=int(status_code),
            processing_time_ms=max(0, int(processing_time_ms or 0)),
            ip_address=_clip(ip_address, IP_ADDRESS_MAX_LENGTH),
            user_agent=_clip(user_agent, USER_AGENT_MAX_LENGTH),
            detected_client=_clip(detected_client, DETECTED_CLIENT_MAX_LENGTH),
            referer=_clip(referer, REFERER_MAX_LENGTH),
            query_string=_clip(query_string, QUERY_STRING_MAX_LENGTH),
        )

    def with_id(self, record_id: int) -> 'RequestRecord':
        return replace(self, id=record_id)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        data['category'] = self.category.label
        return data
