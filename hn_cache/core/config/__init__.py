"""
Configuration Module

Centralized, type-safe configuration management for the HN cache service.

Components:
-----------
- **settings.py**: Pydantic-based configuration with environment variable loading
- **constants.py**: System-wide constants, enums, and defaults

Usage:
------
```python
from hn_cache.core.config import get_settings
from hn_cache.core.config.constants import Stage, StoryCategory

settings = get_settings()
interval = settings.cache.CACHING_INTERVAL
```

Environment Variables:
---------------------
Configuration is loaded from environment variables or a `.env` file:

```bash
REDIS_HOST=localhost
UPSTREAM_BASE_URL=https://hacker-news.firebaseio.com/v0
CACHING_INTERVAL=300
FLUSH_INTERVAL=86400
```
"""

from hn_cache.core.config.settings import Settings, get_settings, reload_settings

__all__ = ["Settings", "get_settings", "reload_settings"]
