"""Domain layer for trafficlog.

Client categories and the immutable request record live here.
It is intentionally framework-agnostic: nothing in this package imports Flask.
"""

from trafficlog.domain.enums import ClientCategory
from trafficlog.domain.records import RequestRecord

__all__ = ['ClientCategory', 'RequestRecord']
