"""User-agent classification.

Maps a raw ``User-Agent`` header to a :class:`ClientCategory` and, where
possible, a human readable client name.

Goals:
- Deterministic: the rule tables are ordered tuples built once at import.
- Category priority is fixed: search bots, social bots, API tools,
  monitors, security scanners, then generic crawlers.
- Anything that looks like a browser and matched no bot rule is a human.
- Never raise; faults degrade to ``Unknown``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from trafficlog.domain import ClientCategory


logger = logging.getLogger(__name__)

UNKNOWN_CLIENT_PREVIEW_LENGTH = 50


@dataclass(frozen=True)
class Classification:
    category: ClientCategory
    detected_client: str | None = None


def _patterns(*sources: str) -> tuple[re.Pattern, ...]:
    return tuple(re.compile(source, re.IGNORECASE) for source in sources)


# Order matters twice: categories are tried top to bottom, and inside a
# category the first matching pattern names the client.
CATEGORY_PATTERNS: tuple[tuple[ClientCategory, tuple[re.Pattern, ...]], ...] = (
    (ClientCategory.SEARCH_BOT, _patterns(
        r'Googlebot',
        r'Bingbot',
        r'Slurp',
        r'DuckDuckBot',
        r'Baiduspider',
        r'YandexBot',
        r'facebookexternalhit',
        r'spider',
        r'crawler',
    )),
    (ClientCategory.SOCIAL_BOT, _patterns(
        r'facebookexternalhit',
        r'Twitterbot',
        r'LinkedInBot',
        r'WhatsApp',
        r'TelegramBot',
        r'Discordbot',
    )),
    (ClientCategory.API_TOOL, _patterns(
        r'Insomnia',
        r'Postman',
        r'curl',
        r'wget',
        r'HTTPie',
        r'Thunder Client',
        r'Paw',
        r'RestSharp',
        r'okhttp',
        r'python-requests',
        r'node-fetch',
        r'axios',
    )),
    (ClientCategory.MONITOR, _patterns(
        r'UptimeRobot',
        r'Pingdom',
        r'StatusCake',
        r'Site24x7',
        r'monitor',
        r'uptime',
    )),
    (ClientCategory.SECURITY_SCANNER, _patterns(
        r'Nessus',
        r'OpenVAS',
        r'Qualys',
        r'Nmap',
        r'sqlmap',
        r'Nikto',
        r'scanner',
    )),
    (ClientCategory.CRAWLER, _patterns(
        r'Scrapy',
        r'BeautifulSoup',
        r'Selenium',
        r'PhantomJS',
        r'HeadlessChrome',
        r'bot',
    )),
)

# Substring -> display name, checked in order against the whole user agent.
KNOWN_CLIENT_NAMES: tuple[tuple[str, str], ...] = (
    ('insomnia', 'Insomnia'),
    ('postman', 'Postman'),
    ('curl', 'cURL'),
    ('wget', 'Wget'),
    ('googlebot', 'Google Bot'),
    ('bingbot', 'Bing Bot'),
    ('facebookexternalhit', 'Facebook Bot'),
    ('twitterbot', 'Twitter Bot'),
    ('uptimerobot', 'UptimeRobot'),
    ('pingdom', 'Pingdom'),
)

BROWSER_PATTERNS: tuple[re.Pattern, ...] = _patterns(
    r'Chrome/[\d.]+',
    r'Firefox/[\d.]+',
    r'Safari/[\d.]+',
    r'Edge/[\d.]+',
    r'Opera/[\d.]+',
    r'Mozilla/',
)


def _client_name(user_agent: str, matched: str) -> str:
    ua = user_agent.lower()
    for token, name in KNOWN_CLIENT_NAMES:
        if token in ua:
            return name
    return matched


def _browser_name(user_agent: str) -> str:
    ua = user_agent.lower()
    if 'chrome' in ua and 'chromium' not in ua:
        return 'Chrome'
    if 'firefox' in ua:
        return 'Firefox'
    if 'safari' in ua and 'chrome' not in ua:
        return 'Safari'
    if 'edge' in ua:
        return 'Edge'
    if 'opera' in ua:
        return 'Opera'
    return 'Browser'


def _unknown_preview(user_agent: str) -> str:
    if len(user_agent) > UNKNOWN_CLIENT_PREVIEW_LENGTH:
        return user_agent[:UNKNOWN_CLIENT_PREVIEW_LENGTH] + '...'
    return user_agent


def _classify(user_agent: str) -> Classification:
    for category, patterns in CATEGORY_PATTERNS:
        for pattern in patterns:
            match = pattern.search(user_agent)
            if match:
                logger.debug('Classified user agent as %s: %s', category.label, user_agent)
                return Classification(category, _client_name(user_agent, match.group(0)))

    for pattern in BROWSER_PATTERNS:
        if pattern.search(user_agent):
            logger.debug('Classified user agent as Human browser: %s', user_agent)
            return Classification(ClientCategory.HUMAN, _browser_name(user_agent))

    logger.debug('Could not classify user agent: %s', user_agent)
    return Classification(ClientCategory.UNKNOWN, _unknown_preview(user_agent))


def classify_user_agent(user_agent: str | None) -> Classification:
    """Classify a raw ``User-Agent`` value.

    Returns ``Classification(UNKNOWN, None)`` for missing or blank input and
    for any internal failure.

    Examples:
        >>> classify_user_agent('curl/7.68.0')
        Classification(category=<ClientCategory.API_TOOL: 4>, detected_client='cURL')
    """
    if user_agent is None or not str(user_agent).strip():
        return Classification(ClientCategory.UNKNOWN)

    try:
        return _classify(str(user_agent))
    except Exception:
        logger.error('Error classifying user agent: %r', user_agent, exc_info=True)
        return Classification(ClientCategory.UNKNOWN)
