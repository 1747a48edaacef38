"""
Request Validation Exceptions
"""

from hn_cache.core.exceptions.base import HNCacheError


class ValidationError(HNCacheError):
    """Base exception for invalid read requests."""
    pass


class UnknownCategoryError(ValidationError):
    """Raised when a story listing is requested for a category the upstream does not publish."""
    pass
