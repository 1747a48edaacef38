"""
Tree Normalizer

Decomposes an entity with embedded child documents (a comment tree) into
flat, independently cacheable entries.

    {"id": 1, "kids": [{"id": 2, "kids": [{"id": 3}]}, {"id": 4}]}

normalizes to the root

    {"id": 1, "kids": [2, 4]}

plus the descendants, in depth-first post-order:

    [("3", {"id": 3}), ("2", {"id": 2, "kids": [3]}), ("4", {"id": 4})]

The function is pure: it performs no cache writes and never mutates its
input. The caller persists the root and every descendant in one batch.
"""

from dataclasses import dataclass, field
from typing import Any

from hn_cache.core.config.constants import ITEM_CHILD_FIELD


@dataclass
class NormalizedTree:
    """Root with child IDs only, plus every flattened descendant as (key, entity)."""

    entity: Any
    descendants: list[tuple[str, dict[str, Any]]] = field(default_factory=list)


def _normalize_into(
    entity: dict[str, Any],
    child_field: str,
    descendants: list[tuple[str, dict[str, Any]]],
) -> dict[str, Any]:
    children = entity.get(child_field)
    if not isinstance(children, list) or not children:
        return entity

    child_ids = []
    for child in children:
        if isinstance(child, dict):
            normalized_child = _normalize_into(child, child_field, descendants)
            child_id = normalized_child.get("id")
            descendants.append((str(child_id), normalized_child))
            child_ids.append(child_id)
        else:
            # Already a reference
            child_ids.append(child)

    return {**entity, child_field: child_ids}


def normalize(entity: Any, child_field: str = ITEM_CHILD_FIELD) -> NormalizedTree:
    """
    Normalize a tree entity.

    Args:
        entity: Upstream document; anything other than a dict is returned as-is
        child_field: Field holding the embedded children

    Returns:
        NormalizedTree whose entity holds child IDs in their original order
    """
    if not isinstance(entity, dict):
        return NormalizedTree(entity=entity)

    descendants: list[tuple[str, dict[str, Any]]] = []
    root = _normalize_into(entity, child_field, descendants)
    return NormalizedTree(entity=root, descendants=descendants)
