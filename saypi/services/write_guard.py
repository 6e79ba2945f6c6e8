"""
Conflict-aware single-row writes.

Deletes follow one pattern: attempt the write, classify a constraint failure,
and enrich a foreign-key failure with a targeted read that counts the
dependents. Upserts are a single store-side statement.
"""

from __future__ import annotations

from typing import Callable, Optional

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable

import saypi.config as config
from saypi.errors import HasDependents, InternalFault, NotFound
from saypi.services.constraints import is_foreign_key_violation

logger = config.logger

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def dialect_insert(db: Session, table):
    """Dialect-specific INSERT supporting ON CONFLICT ... DO UPDATE."""
    dialect = db.get_bind().dialect.name
    insert = _INSERT_BY_DIALECT.get(dialect)
    if insert is None:
        raise InternalFault(f"upsert is not supported on dialect {dialect}")
    return insert(table)


def guarded_delete(
    db: Session,
    statement: Executable,
    *,
    resource: str,
    key: str,
    dependent: str = "dependents",
    count_dependents: Optional[Callable[[Session], int]] = None,
) -> None:
    """Execute a delete of exactly one entity and commit.

    Raises HasDependents when a foreign key blocks the delete and a
    dependent counter is given, and NotFound when nothing was deleted.
    """
    try:
        result = db.execute(statement)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if count_dependents is None or not is_foreign_key_violation(exc):
            raise
        count = count_dependents(db)
        logger.info(
            "delete_blocked_by_dependents",
            extra={"resource": resource, "dependent": dependent, "count": count},
        )
        raise HasDependents(resource, key, dependent, count) from exc

    if result.rowcount == 0:
        raise NotFound(resource, key)

