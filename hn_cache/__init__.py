"""
HN Cache Service

Read-through caching layer in front of the Hacker News content API.
"""

__version__ = "1.0.0"
