from hn_cache.infrastructure.upstream.client import UpstreamClient

__all__ = ["UpstreamClient"]
