"""
Repository: the only path from the service to the store.

Provides the resource operations used by the HTTP layer:
- moods: list, get, set (upsert), delete
- conversations: list, create, get (with lines), delete
- lines: create, get, delete

Every method opens its own session and closes it before returning. Typed
failures from ``saypi.errors`` pass through; any other store error surfaces
as InternalFault.
"""

from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from sqlalchemy import delete, func, select, text
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

import saypi.config as config
from saypi.db import Database, _get_schema_revisions
from saypi.entities import (
    ConversationEntry,
    LineEntry,
    ListArgs,
    ListPage,
    MoodEntry,
)
from saypi.errors import (
    InternalFault,
    NotFound,
    ProtectedEntity,
    RepositoryError,
    ValidationIssue,
)
from saypi.models import Conversation, Line, Mood
from saypi.services.builtins import StaticCatalog
from saypi.services.constraints import is_foreign_key_violation
from saypi.services.identifiers import (
    CONVERSATION_ID_PREFIX,
    LINE_ID_PREFIX,
    insert_with_public_id,
    secure_draw,
)
from saypi.services.listing import QueryTier, StaticTier, Tier, list_tiered
from saypi.services.write_guard import dialect_insert, guarded_delete

logger = config.logger

_moods = Mood.__table__


def repository_call(fn: Callable) -> Callable:
    @wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (RepositoryError, ValidationIssue):
            raise
        except SQLAlchemyError as exc:
            logger.error(
                "repository_store_error",
                extra={"operation": fn.__name__, "error_class": type(exc).__name__, "detail": str(exc)},
            )
            raise InternalFault(f"{fn.__name__} failed") from exc
    return wrapper


def _mood_name_matches(name: str):
    return func.lower(Mood.name) == func.lower(name)


def _mood_entry(row) -> MoodEntry:
    return MoodEntry(
        name=row.name,
        eyes=row.eyes,
        tongue=row.tongue,
        user_defined=True,
        seq_id=row.id,
    )


def _seq_window(db: Session, model, filters, to_entry, position, descending, count) -> list:
    """Rows of ``model`` strictly beyond seq id ``position``, ordered by seq id."""
    stmt = select(model).where(*filters)
    if position is not None:
        stmt = stmt.where(model.id < position if descending else model.id > position)
    stmt = stmt.order_by(model.id.desc() if descending else model.id.asc()).limit(count)
    return [to_entry(row) for row in db.execute(stmt).scalars()]


class Repository:
    def __init__(
        self,
        database: Database,
        catalog: StaticCatalog,
        *,
        draw: Callable[[], int] = secure_draw,
        max_id_attempts: Optional[int] = None,
    ):
        self._database = database
        self.catalog = catalog
        self._draw = draw
        self._max_id_attempts = max_id_attempts

    @property
    def database(self) -> Database:
        return self._database

    @repository_call
    def ping(self) -> None:
        """Round-trip to the store; raises InternalFault when it is unreachable."""
        with self._database.session() as db:
            db.execute(text("SELECT 1"))

    def schema_revisions(self) -> tuple[Optional[str], Optional[str]]:
        """(current, head) Alembic revisions of the store."""
        return _get_schema_revisions(self._database.engine)

    # -------------------------------------------------------------------------
    # Moods
    # -------------------------------------------------------------------------

    def _mood_tiers(self, db: Session, user_id: str) -> list[Tier]:
        def lookup(name: str) -> Optional[int]:
            return db.execute(
                select(Mood.id).where(Mood.user_id == user_id, _mood_name_matches(name))
            ).scalar_one_or_none()

        def query(position, descending, count):
            return _seq_window(
                db, Mood, (Mood.user_id == user_id,), _mood_entry, position, descending, count
            )

        # Global order: user-defined moods, then built-ins.
        return [QueryTier(lookup, query), StaticTier(self.catalog)]

    def _find_mood(self, db: Session, user_id: str, name: str) -> Optional[MoodEntry]:
        builtin = self.catalog.find(name)
        if builtin is not None:
            return builtin
        row = db.execute(
            select(Mood).where(Mood.user_id == user_id, _mood_name_matches(name))
        ).scalar_one_or_none()
        return _mood_entry(row) if row is not None else None

    @repository_call
    def list_moods(self, user_id: str, args: ListArgs) -> ListPage:
        with self._database.session() as db:
            return list_tiered(self._mood_tiers(db, user_id), args)

    @repository_call
    def get_mood(self, user_id: str, name: str) -> MoodEntry:
        with self._database.session() as db:
            mood = self._find_mood(db, user_id, name)
        if mood is None:
            raise NotFound("mood", name)
        return mood

    @repository_call
    def set_mood(self, user_id: str, name: str, eyes: str, tongue: str) -> MoodEntry:
        """Create or update a user-defined mood in one conditional statement."""
        if self.catalog.is_reserved(name):
            raise ProtectedEntity("update", "mood", name)

        with self._database.session() as db:
            stmt = dialect_insert(db, _moods).values(
                user_id=user_id,
                name=name,
                eyes=eyes,
                tongue=tongue,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=[_moods.c.user_id, func.lower(_moods.c.name)],
                set_={"eyes": stmt.excluded.eyes, "tongue": stmt.excluded.tongue},
            ).returning(_moods.c.id, _moods.c.name, _moods.c.eyes, _moods.c.tongue)
            row = db.execute(stmt).one()
            db.commit()
        return _mood_entry(row)

    @repository_call
    def delete_mood(self, user_id: str, name: str) -> None:
        if self.catalog.is_reserved(name):
            raise ProtectedEntity("delete", "mood", name)

        def count_lines(db: Session) -> int:
            return db.execute(
                select(func.count(Line.id))
                .join(Mood, Line.mood_id == Mood.id)
                .where(Mood.user_id == user_id, _mood_name_matches(name))
            ).scalar_one()

        with self._database.session() as db:
            guarded_delete(
                db,
                delete(Mood)
                .where(Mood.user_id == user_id, _mood_name_matches(name))
                .execution_options(synchronize_session=False),
                resource="mood",
                key=name,
                dependent="lines",
                count_dependents=count_lines,
            )

    # -------------------------------------------------------------------------
    # Conversations
    # -------------------------------------------------------------------------

    @staticmethod
    def _conversation_entry(row: Conversation) -> ConversationEntry:
        return ConversationEntry(public_id=row.public_id, heading=row.heading, seq_id=row.id)

    def _conversation_tiers(self, db: Session, user_id: str) -> list[Tier]:
        def lookup(public_id: str) -> Optional[int]:
            return self._conversation_seq(db, user_id, public_id)

        def query(position, descending, count):
            return _seq_window(
                db,
                Conversation,
                (Conversation.user_id == user_id,),
                self._conversation_entry,
                position,
                descending,
                count,
            )

        return [QueryTier(lookup, query)]

    @staticmethod
    def _conversation_seq(db: Session, user_id: str, public_id: str) -> Optional[int]:
        return db.execute(
            select(Conversation.id).where(
                Conversation.user_id == user_id,
                Conversation.public_id == public_id,
            )
        ).scalar_one_or_none()

    @repository_call
    def list_conversations(self, user_id: str, args: ListArgs) -> ListPage:
        with self._database.session() as db:
            return list_tiered(self._conversation_tiers(db, user_id), args)

    @repository_call
    def new_conversation(self, user_id: str, heading: str) -> ConversationEntry:
        with self._database.session() as db:
            row = insert_with_public_id(
                db,
                CONVERSATION_ID_PREFIX,
                lambda public_id: Conversation(public_id=public_id, user_id=user_id, heading=heading),
                draw=self._draw,
                max_attempts=self._max_id_attempts,
            )
            return self._conversation_entry(row)

    @repository_call
    def get_conversation(self, user_id: str, conversation_id: str) -> ConversationEntry:
        with self._database.session() as db:
            row = db.execute(
                select(Conversation).where(
                    Conversation.user_id == user_id,
                    Conversation.public_id == conversation_id,
                )
            ).scalar_one_or_none()
            if row is None:
                raise NotFound("conversation", conversation_id)

            results = db.execute(
                self._line_query()
                .where(Line.conversation_id == row.id)
                .order_by(Line.id.asc())
            ).all()
            lines = tuple(self._line_entry(result) for result in results)
            return ConversationEntry(
                public_id=row.public_id,
                heading=row.heading,
                seq_id=row.id,
                lines=lines,
            )

    @repository_call
    def delete_conversation(self, user_id: str, conversation_id: str) -> None:
        with self._database.session() as db:
            guarded_delete(
                db,
                delete(Conversation)
                .where(
                    Conversation.user_id == user_id,
                    Conversation.public_id == conversation_id,
                )
                .execution_options(synchronize_session=False),
                resource="conversation",
                key=conversation_id,
            )

    # -------------------------------------------------------------------------
    # Lines
    # -------------------------------------------------------------------------

    @staticmethod
    def _line_query():
        return select(Line, Mood.eyes, Mood.tongue).outerjoin(Mood, Line.mood_id == Mood.id)

    def _line_entry(self, result) -> LineEntry:
        line, eyes, tongue = result
        if line.mood_id is None:
            # Built-in moods are not rows; read their live attributes from the catalog.
            builtin = self.catalog.find(line.mood_name)
            eyes = builtin.eyes if builtin else None
            tongue = builtin.tongue if builtin else None
        return LineEntry(
            public_id=line.public_id,
            animal=line.animal,
            think=line.think,
            mood_name=line.mood_name,
            text=line.text,
            eyes=eyes or "",
            tongue=tongue or "",
            seq_id=line.id,
        )

    @staticmethod
    def _unknown_mood(mood_name: str) -> ValidationIssue:
        return ValidationIssue(
            f"{mood_name!r} does not exist",
            field="mood",
            error_type="not_found",
        )

    @repository_call
    def insert_line(
        self,
        user_id: str,
        conversation_id: str,
        *,
        animal: str,
        think: bool,
        mood_name: str,
        text: str,
    ) -> LineEntry:
        with self._database.session() as db:
            mood = self._find_mood(db, user_id, mood_name)
            if mood is None:
                raise self._unknown_mood(mood_name)

            conversation_seq = self._conversation_seq(db, user_id, conversation_id)
            if conversation_seq is None:
                raise NotFound("conversation", conversation_id)

            def build(public_id: str) -> Line:
                return Line(
                    public_id=public_id,
                    animal=animal,
                    text=text,
                    think=think,
                    mood_name=mood.name,
                    mood_id=mood.seq_id if mood.user_defined else None,
                    conversation_id=conversation_seq,
                )

            try:
                row = insert_with_public_id(
                    db,
                    LINE_ID_PREFIX,
                    build,
                    draw=self._draw,
                    max_attempts=self._max_id_attempts,
                )
            except IntegrityError as exc:
                if not is_foreign_key_violation(exc):
                    raise
                # A parent was deleted between lookup and insert.
                if self._conversation_seq(db, user_id, conversation_id) is None:
                    raise NotFound("conversation", conversation_id) from exc
                raise self._unknown_mood(mood_name) from exc

        return LineEntry(
            public_id=row.public_id,
            animal=animal,
            think=think,
            mood_name=mood.name,
            text=text,
            eyes=mood.eyes,
            tongue=mood.tongue,
            seq_id=row.id,
        )

    @repository_call
    def get_line(self, user_id: str, conversation_id: str, line_id: str) -> LineEntry:
        with self._database.session() as db:
            result = db.execute(
                self._line_query()
                .join(Conversation, Line.conversation_id == Conversation.id)
                .where(
                    Conversation.public_id == conversation_id,
                    Conversation.user_id == user_id,
                    Line.public_id == line_id,
                )
            ).one_or_none()
            if result is None:
                raise NotFound("line", line_id)
            return self._line_entry(result)

    @repository_call
    def delete_line(self, user_id: str, conversation_id: str, line_id: str) -> None:
        owned_conversation = select(Conversation.id).where(
            Conversation.public_id == conversation_id,
            Conversation.user_id == user_id,
        )
        with self._database.session() as db:
            guarded_delete(
                db,
                delete(Line)
                .where(
                    Line.public_id == line_id,
                    Line.conversation_id.in_(owned_conversation),
                )
                .execution_options(synchronize_session=False),
                resource="line",
                key=line_id,
            )
