from __future__ import annotations

from enum import Enum


class ClientCategory(Enum):
    """Classification outcome for an observed client identity.

    Numeric values are what gets stored in the ``request_logs.category``
    column, so they must never be renumbered.
    """

    UNKNOWN = 0
    HUMAN = 1
    SEARCH_BOT = 2
    SOCIAL_BOT = 3
    API_TOOL = 4
    CRAWLER = 5
    MONITOR = 6
    SECURITY_SCANNER = 7

    @property
    def label(self) -> str:
        return _LABELS[self]

    def __str__(self) -> str:
        return self.label


_LABELS: dict[ClientCategory, str] = {
    ClientCategory.UNKNOWN: 'Unknown',
    ClientCategory.HUMAN: 'Human',
    ClientCategory.SEARCH_BOT: 'SearchBot',
    ClientCategory.SOCIAL_BOT: 'SocialBot',
    ClientCategory.API_TOOL: 'ApiTool',
    ClientCategory.CRAWLER: 'Crawler',
    ClientCategory.MONITOR: 'Monitor',
    ClientCategory.SECURITY_SCANNER: 'SecurityScanner',
}
