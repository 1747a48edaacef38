"""
Connection Builder

Cursor-based windowing used for every list-valued field (story listings,
item kids/parts, user submissions).

Algorithm:
    1. Start index
       - `after` found at index i  -> min(i + 1, len - 1)
       - `after` not found/absent  -> 0
    2. Page size
       - `first` positive          -> min(first, max_page_size)
       - `first` absent or <= 0    -> everything from start (uncapped)
    3. Window = sequence[start:start + size]

A cursor is the literal ID of an element, not an opaque token. A cursor
on the last element yields the last element again rather than an empty
page.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from hn_cache.core.config.constants import MAX_PAGE_SIZE


@dataclass(frozen=True)
class PageInfo:
    has_next_page: bool = False
    has_previous_page: bool = False
    start_cursor: Any = None
    end_cursor: Any = None


@dataclass(frozen=True)
class Connection:
    """A window over a sequence plus pagination metadata."""

    page_info: PageInfo = field(default_factory=PageInfo)
    count: int = 0
    edges: list[Any] = field(default_factory=list)

    def with_edges(self, edges: list[Any]) -> "Connection":
        """Same window and metadata, edges replaced (e.g. IDs -> resolved entities)."""
        return replace(self, edges=list(edges))

    def to_dict(self) -> dict[str, Any]:
        return {
            "pageInfo": {
                "hasNextPage": self.page_info.has_next_page,
                "hasPreviousPage": self.page_info.has_previous_page,
                "startCursor": self.page_info.start_cursor,
                "endCursor": self.page_info.end_cursor,
            },
            "count": self.count,
            "edges": list(self.edges),
        }


def _cursor_index(sequence: Sequence[Any], after: Any) -> int | None:
    """Index of `after` in sequence; numeric strings match integer IDs."""
    try:
        return sequence.index(after)
    except ValueError:
        pass

    if isinstance(after, str):
        try:
            return sequence.index(int(after))
        except ValueError:
            return None
    return None


def paginate(
    sequence: Sequence[Any] | None,
    first: int | None = None,
    after: Any = None,
    max_page_size: int = MAX_PAGE_SIZE,
) -> Connection:
    """
    Window `sequence` by (first, after).

    Never raises: a missing sequence yields an empty connection.
    """
    if sequence is None:
        return Connection()

    sequence = list(sequence)
    length = len(sequence)

    start = 0
    if after is not None:
        index = _cursor_index(sequence, after)
        if index is not None:
            start = max(min(index + 1, length - 1), 0)

    if isinstance(first, int) and not isinstance(first, bool) and first > 0:
        size = min(first, max_page_size)
    else:
        size = length - start

    window = sequence[start:start + size]

    return Connection(
        page_info=PageInfo(
            has_next_page=start + size < length,
            has_previous_page=start > 0,
            start_cursor=window[0] if window else None,
            end_cursor=window[-1] if window else None,
        ),
        count=length,
        edges=window,
    )
