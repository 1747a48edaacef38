"""
Exception Module

Structured exception hierarchy for the HN cache service.

Module Structure:
-----------------
- **base.py**: HNCacheError base class
- **cache.py**: Cache backend exceptions (absorbed by the read path)
- **upstream.py**: Upstream API exceptions (surfaced to readers)
- **validation.py**: Request validation exceptions

Usage:
------
```python
from hn_cache.core.exceptions import CacheBackendError, UpstreamError
```
"""

# Base exception
from hn_cache.core.exceptions.base import HNCacheError

# Cache exceptions
from hn_cache.core.exceptions.cache import (
    CacheBackendError,
    CacheConnectionError,
    CacheError,
    CacheSerializationError,
)

# Upstream exceptions
from hn_cache.core.exceptions.upstream import UpstreamError

# Validation exceptions
from hn_cache.core.exceptions.validation import UnknownCategoryError, ValidationError

__all__ = [
    # Base
    "HNCacheError",
    # Cache
    "CacheError",
    "CacheBackendError",
    "CacheConnectionError",
    "CacheSerializationError",
    # Upstream
    "UpstreamError",
    # Validation
    "ValidationError",
    "UnknownCategoryError",
]
