"""
Services Module

- **read_through.py**: freshness policy, upstream fallback, background writes
- **normalizer.py**: flattening of embedded comment trees
- **connection.py**: cursor windowing for list-valued fields
- **content_service.py**: stories / item / user entry operations
- **cache_warmer.py**: periodic refresh and flush
"""

from hn_cache.services.cache_warmer import CacheWarmer
from hn_cache.services.connection import Connection, PageInfo, paginate
from hn_cache.services.content_service import ContentService
from hn_cache.services.normalizer import NormalizedTree, normalize
from hn_cache.services.read_through import ReadThroughCache

__all__ = [
    "CacheWarmer",
    "Connection",
    "ContentService",
    "NormalizedTree",
    "PageInfo",
    "ReadThroughCache",
    "normalize",
    "paginate",
]
