"""Best-effort client IP resolution from proxy headers."""

from __future__ import annotations

import logging
from typing import Mapping


logger = logging.getLogger(__name__)


def _forwarded_for_ips(header_value: str | None) -> list[str]:
    if not header_value:
        return []
    return [part.strip() for part in header_value.split(',')]


def extract_client_ip(headers: Mapping[str, str] | None, remote_addr: str | None) -> str | None:
    """Return the originating client IP.

    Precedence: first ``X-Forwarded-For`` entry, then ``X-Real-IP``, then the
    transport remote address. Returns ``None`` when nothing usable is found
    or the headers cannot be read.
    """
    try:
        headers = headers or {}

        forwarded = _forwarded_for_ips(headers.get('X-Forwarded-For'))
        if forwarded and forwarded[0]:
            return forwarded[0]

        real_ip = (headers.get('X-Real-IP') or '').strip()
        if real_ip:
            return real_ip

        return remote_addr or None
    except Exception:
        logger.warning('Client IP extraction failed', exc_info=True)
        return None
