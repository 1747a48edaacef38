"""
Upstream API Exceptions
"""

from hn_cache.core.exceptions.base import HNCacheError


class UpstreamError(HNCacheError):
    """
    Raised when the upstream API could not produce a document.

    Only raised once the retry budget is exhausted. The last underlying
    error is chained as __cause__ and summarized in details.
    """
    pass
