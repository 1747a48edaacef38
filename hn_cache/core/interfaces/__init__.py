"""
Interfaces Module

Protocols that decouple services from infrastructure implementations.
"""

from hn_cache.core.interfaces.cache import CacheBackend

__all__ = ["CacheBackend"]
