"""
Public identifier generation.

Identifiers are a short kind prefix followed by a base-36 rendering of a
random integer in ``[0, 2**63 - 1)``. Uniqueness is enforced by the store;
a collision is retried with a fresh draw a bounded number of times.
"""

from __future__ import annotations

import secrets
from typing import Callable, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import saypi.config as config
from saypi.errors import InternalFault
from saypi.services.constraints import is_unique_violation

CONVERSATION_ID_PREFIX = "cv_"
LINE_ID_PREFIX = "ln_"

MAX_INT64 = 2**63 - 1
_BASE36_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

logger = config.logger

RowT = TypeVar("RowT")


def secure_draw() -> int:
    return secrets.randbelow(MAX_INT64)


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError("value must be non-negative")
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36_DIGITS[remainder])
    return "".join(reversed(digits))


def new_public_id(prefix: str, draw: Callable[[], int] = secure_draw) -> str:
    return prefix + to_base36(draw())


def insert_with_public_id(
    db: Session,
    prefix: str,
    build_row: Callable[[str], RowT],
    *,
    draw: Callable[[], int] = secure_draw,
    max_attempts: int | None = None,
) -> RowT:
    """Insert ``build_row(public_id)`` and commit, redrawing on id collisions.

    Only a uniqueness violation is retried. Any other error propagates after
    rollback. Running out of attempts raises InternalFault.
    """
    attempts = max_attempts if max_attempts is not None else config.PUBLIC_ID_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        public_id = new_public_id(prefix, draw)
        row = build_row(public_id)
        db.add(row)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            if not is_unique_violation(exc):
                raise
            logger.info(
                "public_id_collision",
                extra={"prefix": prefix, "attempt": attempt},
            )
            continue
        return row

    raise InternalFault(f"unable to allocate a unique {prefix}* identifier after {attempts} attempts")
