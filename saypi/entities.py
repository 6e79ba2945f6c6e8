"""
Value objects returned by the repository.

Sequence ids ride along for ordering and cursor resolution but are never
part of a payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class MoodEntry:
    name: str
    eyes: str
    tongue: str
    user_defined: bool
    seq_id: Optional[int] = None

    @property
    def public_id(self) -> str:
        return self.name

    def to_payload(self) -> dict:
        return {
            "name": self.name,
            "eyes": self.eyes,
            "tongue": self.tongue,
            "user_defined": self.user_defined,
        }


@dataclass(frozen=True)
class LineEntry:
    public_id: str
    animal: str
    think: bool
    mood_name: str
    text: str
    eyes: str
    tongue: str
    seq_id: Optional[int] = None

    def to_payload(self, output: Optional[str] = None) -> dict:
        payload = {
            "id": self.public_id,
            "animal": self.animal,
            "think": self.think,
            "mood": self.mood_name,
            "text": self.text,
        }
        if output is not None:
            payload["output"] = output
        return payload


@dataclass(frozen=True)
class ConversationEntry:
    public_id: str
    heading: str
    seq_id: Optional[int] = None
    lines: tuple[LineEntry, ...] = field(default_factory=tuple)

    def to_payload(self) -> dict:
        return {"id": self.public_id, "heading": self.heading}


@dataclass(frozen=True)
class ListArgs:
    after: Optional[str] = None
    before: Optional[str] = None
    limit: int = 10

    @property
    def descending(self) -> bool:
        return bool(self.before)

    @property
    def cursor(self) -> Optional[str]:
        return (self.before if self.descending else self.after) or None


@dataclass(frozen=True)
class ListPage:
    items: list
    has_more: bool

    @property
    def cursor(self) -> Optional[str]:
        if not self.items:
            return None
        return self.items[-1].public_id
