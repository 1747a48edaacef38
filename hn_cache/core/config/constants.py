"""
System Constants and Enumerations

This module defines system-wide constants and enumerations used across
the HN cache service.

Architectural Decision: Centralized constants for maintainability
- Single source of truth for magic numbers
- Type-safe enums for stage tracking and categories
- Easy to update and track changes
"""

from enum import Enum

# ============================================================================
# Stage Identifiers (for structured logging)
# ============================================================================


class Stage(str, Enum):
    """
    Processing stages used to tag log events.

    Format: {SEQUENCE}_{DESCRIPTIVE_NAME}
    - SEQUENCE: Numeric order (0.0, 1.0, 2.0) or alphabetic prefix (W, F)
    - DESCRIPTIVE_NAME: Clear, uppercase description with underscores

    Examples:
        logger.info("Cache hit", stage=Stage.CACHE_LOOKUP, key="8863")
    """

    # Read path (Sequential 0.0 - 5.0)
    INITIALIZATION = "0.0_INITIALIZATION"
    CACHE_LOOKUP = "1.0_CACHE_LOOKUP"
    UPSTREAM_FETCH = "2.0_UPSTREAM_FETCH"
    NORMALIZATION = "3.0_NORMALIZATION"
    CACHE_WRITE = "4.0_CACHE_WRITE"
    PAGINATION = "5.0_PAGINATION"

    # Background work (Alphabetic Prefixes)
    WARMING = "W_CACHE_WARMING"
    FLUSH = "F_CACHE_FLUSH"
    SHUTDOWN = "S_SHUTDOWN"


# ============================================================================
# Story Categories
# ============================================================================


class StoryCategory(str, Enum):
    """
    Listings published by the upstream API.

    Each category is a JSON array of item IDs at {base_url}/{category}.json.
    """

    TOP = "topstories"
    NEW = "newstories"
    BEST = "beststories"
    ASK = "askstories"
    SHOW = "showstories"
    JOB = "jobstories"


ALL_CATEGORIES = [category.value for category in StoryCategory]


# ============================================================================
# Upstream Resources
# ============================================================================

RESOURCE_ITEM = "item"
RESOURCE_USER = "user"

UPSTREAM_BASE_URL = "https://hacker-news.firebaseio.com/v0"

# Retry policy (fixed delay, no jitter)
MAX_RETRIES = 3  # Attempts beyond the first
RETRY_DELAY = 0.5  # Seconds between attempts

# ============================================================================
# Cache Layout
# ============================================================================

# Timestamp companion key: "{key}:time"
CACHE_TIME_SUFFIX = ":time"

CACHING_INTERVAL = 300  # Freshness window (5 minutes)
FLUSH_INTERVAL = 86400  # Wholesale flush (24 hours)

# ============================================================================
# Pagination
# ============================================================================

MAX_PAGE_SIZE = 20

# Fields of an item that hold lists of item IDs
ITEM_CHILD_FIELD = "kids"
ITEM_PARTS_FIELD = "parts"
USER_SUBMITTED_FIELD = "submitted"

# ============================================================================
# HTTP Headers
# ============================================================================

HEADER_REQUEST_ID = "X-Request-ID"
