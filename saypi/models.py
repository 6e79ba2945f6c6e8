"""
SayAPI Database Models
PostgreSQL (production) / SQLite (development, tests)
"""

from datetime import datetime

from sqlalchemy import (
    Column, Integer, String, Text, Boolean, CHAR,
    DateTime, ForeignKey, Index, event, func
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


# =============================================================================
# Moods (Dynamic tier of the mood catalog)
# =============================================================================

class Mood(Base):
    __tablename__ = "moods"

    id = Column(Integer, primary_key=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    user_id = Column(Text, nullable=False)
    name = Column(Text, nullable=False)
    eyes = Column(CHAR(2), nullable=False)
    tongue = Column(CHAR(2), nullable=False)

    lines = relationship("Line", back_populates="mood", passive_deletes="all")


# Case-insensitive uniqueness per owner; also the upsert conflict target.
Index("ux_moods_user_lower_name", Mood.user_id, func.lower(Mood.name), unique=True)


# =============================================================================
# Conversations
# =============================================================================

class Conversation(Base):
    __tablename__ = "conversations"

    id = Column(Integer, primary_key=True)
    public_id = Column(String(32), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    heading = Column(Text, nullable=False)
    user_id = Column(Text, nullable=False, index=True)

    lines = relationship("Line", back_populates="conversation", passive_deletes=True)


# =============================================================================
# Lines
# =============================================================================

class Line(Base):
    __tablename__ = "lines"

    id = Column(Integer, primary_key=True)
    public_id = Column(String(32), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    animal = Column(Text, nullable=False)
    text = Column(Text, nullable=False)
    think = Column(Boolean, nullable=False)
    mood_name = Column(Text, nullable=False)
    # NULL for built-in moods, which have no row.
    mood_id = Column(
        Integer,
        ForeignKey("moods.id", name="fk_lines_mood"),
        nullable=True,
        index=True,
    )
    conversation_id = Column(
        Integer,
        ForeignKey("conversations.id", name="fk_lines_conversation", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    mood = relationship("Mood", back_populates="lines")
    conversation = relationship("Conversation", back_populates="lines")


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    module = type(dbapi_connection).__module__
    if not module.startswith("sqlite3"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


__all__ = [
    "Base",
    "Mood",
    "Conversation",
    "Line",
]
