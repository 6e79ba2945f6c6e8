"""
Built-in moods: the Static tier of the mood catalog.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from saypi.entities import MoodEntry


DEFAULT_MOOD_NAME = "default"

BUILTIN_MOODS: tuple[MoodEntry, ...] = (
    MoodEntry(DEFAULT_MOOD_NAME, "oo", "  ", False),
    MoodEntry("borg", "==", "  ", False),
    MoodEntry("dead", "xx", "U ", False),
    MoodEntry("greedy", "$$", "  ", False),
    MoodEntry("stoned", "**", "U ", False),
    MoodEntry("tired", "--", "  ", False),
    MoodEntry("wired", "OO", "  ", False),
    MoodEntry("young", "..", "  ", False),
)


class StaticCatalog:
    """Immutable, declaration-ordered set of entries shared by every owner.

    Lookups are case-insensitive. Positions are indexes into the
    declaration order.
    """

    def __init__(self, entries: Iterable[MoodEntry]):
        self._entries: tuple[MoodEntry, ...] = tuple(entries)
        self._index = {}
        for position, entry in enumerate(self._entries):
            key = entry.name.lower()
            if key in self._index:
                raise ValueError(f"duplicate built-in name: {entry.name}")
            self._index[key] = position

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    @property
    def entries(self) -> tuple[MoodEntry, ...]:
        return self._entries

    def position_of(self, name: str) -> Optional[int]:
        return self._index.get(name.lower())

    def find(self, name: str) -> Optional[MoodEntry]:
        position = self.position_of(name)
        if position is None:
            return None
        return self._entries[position]

    def is_reserved(self, name: str) -> bool:
        return name.lower() in self._index

    def window(self, position: Optional[int], descending: bool, count: int) -> Sequence[MoodEntry]:
        """Up to ``count`` entries strictly beyond ``position`` in the given direction."""
        if count <= 0:
            return ()
        if descending:
            end = len(self._entries) if position is None else position
            start = max(0, end - count)
            return tuple(reversed(self._entries[start:end]))
        start = 0 if position is None else position + 1
        return self._entries[start:start + count]


def default_catalog() -> StaticCatalog:
    return StaticCatalog(BUILTIN_MOODS)
