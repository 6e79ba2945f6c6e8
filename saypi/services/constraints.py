"""
Store constraint classification.

The only module that understands driver-specific error encodings. Callers
get a ``ConstraintViolation`` member (or ``None`` for anything else) and
decide what it means for their operation.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from sqlalchemy.exc import IntegrityError


class ConstraintViolation(str, Enum):
    unique = "unique"
    foreign_key = "foreign_key"


# SQLSTATE class 23 codes (PostgreSQL: psycopg2 ``pgcode``, psycopg ``sqlstate``)
_SQLSTATE_CODES = {
    "23505": ConstraintViolation.unique,
    "23503": ConstraintViolation.foreign_key,
}

# Extended result code names (sqlite3 ``sqlite_errorname``)
_SQLITE_CODES = {
    "SQLITE_CONSTRAINT_UNIQUE": ConstraintViolation.unique,
    "SQLITE_CONSTRAINT_PRIMARYKEY": ConstraintViolation.unique,
    "SQLITE_CONSTRAINT_FOREIGNKEY": ConstraintViolation.foreign_key,
}


def classify_integrity_error(exc: BaseException) -> Optional[ConstraintViolation]:
    """Map a driver integrity error onto a ConstraintViolation."""
    orig = exc.orig if isinstance(exc, IntegrityError) else exc
    if orig is None:
        return None

    sqlstate = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if sqlstate:
        return _SQLSTATE_CODES.get(sqlstate)

    sqlite_name = getattr(orig, "sqlite_errorname", None)
    if sqlite_name:
        return _SQLITE_CODES.get(sqlite_name)

    return None


def is_unique_violation(exc: BaseException) -> bool:
    return classify_integrity_error(exc) is ConstraintViolation.unique


def is_foreign_key_violation(exc: BaseException) -> bool:
    return classify_integrity_error(exc) is ConstraintViolation.foreign_key
