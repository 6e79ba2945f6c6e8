"""
Tiered catalog listing.

A listed resource is an ordered sequence of tiers. The global order is the
tiers' entries concatenated in tier order; descending traversal is the exact
reverse. Tier boundaries are hard cuts, never a merge by key.

Each tier exposes two primitives:

- ``resolve_cursor(cursor)`` returns an opaque position or ``None``.
- ``fetch(position, descending, count)`` returns up to ``count`` entries
  strictly beyond ``position`` (or from the tier boundary when ``position``
  is ``None``) in the requested direction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, Sequence

from saypi.entities import ListArgs, ListPage
from saypi.errors import CursorNotFound
from saypi.services.builtins import StaticCatalog


class Tier(ABC):
    @abstractmethod
    def resolve_cursor(self, cursor: str) -> Optional[Any]:
        """Position of ``cursor`` in this tier, or None."""

    @abstractmethod
    def fetch(self, position: Optional[Any], descending: bool, count: int) -> Sequence:
        """Up to ``count`` entries strictly beyond ``position``."""


class StaticTier(Tier):
    def __init__(self, catalog: StaticCatalog):
        self.catalog = catalog

    def resolve_cursor(self, cursor: str) -> Optional[int]:
        return self.catalog.position_of(cursor)

    def fetch(self, position: Optional[int], descending: bool, count: int) -> Sequence:
        return list(self.catalog.window(position, descending, count))


class QueryTier(Tier):
    """A Dynamic tier backed by two store lookups.

    ``lookup(cursor)`` maps a public id to its sequence id.
    ``query(seq_id, descending, count)`` returns entries strictly beyond
    ``seq_id`` ordered by sequence id in the requested direction.
    """

    def __init__(
        self,
        lookup: Callable[[str], Optional[int]],
        query: Callable[[Optional[int], bool, int], Sequence],
    ):
        self._lookup = lookup
        self._query = query

    def resolve_cursor(self, cursor: str) -> Optional[int]:
        return self._lookup(cursor)

    def fetch(self, position: Optional[int], descending: bool, count: int) -> Sequence:
        if count <= 0:
            return []
        return list(self._query(position, descending, count))


def resolve_cursor(tiers: Sequence[Tier], cursor: str, descending: bool) -> tuple[int, Any]:
    """Find the tier holding ``cursor``; returns (tier index, position)."""
    for index, tier in enumerate(tiers):
        position = tier.resolve_cursor(cursor)
        if position is not None:
            return index, position
    raise CursorNotFound(cursor, descending=descending)


def query_tiers_from(
    tiers: Sequence[Tier],
    start_index: int,
    position: Optional[Any],
    descending: bool,
    count: int,
) -> list:
    """Collect up to ``count`` entries starting in ``tiers[start_index]``.

    Only the starting tier honours ``position``; later tiers are read from
    their own boundary with whatever budget remains.
    """
    items: list = []
    remaining = count
    for index in range(start_index, len(tiers)):
        if remaining <= 0:
            break
        fetched = tiers[index].fetch(position if index == start_index else None, descending, remaining)
        items.extend(fetched)
        remaining -= len(fetched)
    return items


def list_tiered(tiers: Sequence[Tier], args: ListArgs) -> ListPage:
    """List one page across ``tiers`` given in ascending global order."""
    if args.limit < 0:
        raise ValueError("limit must be non-negative")

    descending = args.descending
    ordered = list(reversed(tiers)) if descending else list(tiers)

    start_index, position = 0, None
    cursor = args.cursor
    if cursor is not None:
        start_index, position = resolve_cursor(ordered, cursor, descending)

    # One extra entry tells us whether anything lies beyond the page.
    items = query_tiers_from(ordered, start_index, position, descending, args.limit + 1)
    has_more = len(items) > args.limit
    return ListPage(items=items[:args.limit], has_more=has_more)
