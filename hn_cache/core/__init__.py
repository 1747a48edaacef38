"""
Core Module

Foundational components: configuration, logging, exceptions and interfaces.
"""

from .exceptions import (
    CacheBackendError,
    CacheConnectionError,
    CacheError,
    HNCacheError,
    UnknownCategoryError,
    UpstreamError,
    ValidationError,
)
from .logging import (
    clear_request_id,
    get_logger,
    get_request_id,
    log_stage,
    set_request_id,
    setup_logging,
)

__all__ = [
    # Exceptions
    "CacheBackendError",
    "CacheConnectionError",
    "CacheError",
    "HNCacheError",
    "UnknownCategoryError",
    "UpstreamError",
    "ValidationError",
    # Logging
    "clear_request_id",
    "get_logger",
    "get_request_id",
    "log_stage",
    "set_request_id",
    "setup_logging",
]
