"""
Shared validation helpers for SayAPI request fields.

These run in the HTTP layer before the repository is called. The repository
itself only enforces relational rules.
"""

from __future__ import annotations

from typing import Optional

from saypi.config import (
    DEFAULT_LIST_LIMIT,
    MAX_HEADING_LENGTH,
    MAX_LIST_LIMIT,
    MAX_TEXT_LENGTH,
)
from saypi.entities import ListArgs
from saypi.errors import InvalidParams, ValidationIssue

DEFAULT_EYES = "oo"
DEFAULT_TONGUE = "  "


def strip_nul(value: Optional[str]) -> str:
    return (value or "").replace("\x00", "")


def validate_face_part(value: str, field: str) -> None:
    if value and len(value) != 2:
        raise ValidationIssue(
            "must be a string containing two characters",
            field=field,
            error_type="invalid_length",
        )


def validate_max_length(value: str, field: str, max_len: int) -> None:
    if len(value) > max_len:
        raise ValidationIssue(
            f"must be a string of less than {max_len} characters",
            field=field,
            error_type="max_length",
        )


def validate_heading(value: str) -> None:
    validate_max_length(value, "heading", MAX_HEADING_LENGTH)


def validate_text(value: str) -> None:
    validate_max_length(value, "text", MAX_TEXT_LENGTH)


def parse_think(value: Optional[str]) -> bool:
    if value in (None, "", "false"):
        return False
    if value == "true":
        return True
    raise ValidationIssue(
        "must be either 'true' or 'false'",
        field="think",
        error_type="invalid_value",
    )


def parse_list_args(
    starting_after: Optional[str],
    ending_before: Optional[str],
    limit: Optional[str],
) -> ListArgs:
    if starting_after and ending_before:
        raise InvalidParams([
            ValidationIssue(
                "you may not provide multiple cursor parameters",
                field="starting_after, ending_before",
                error_type="conflict",
            )
        ])

    if limit in (None, ""):
        limit_value = DEFAULT_LIST_LIMIT
    else:
        try:
            limit_value = int(limit)
        except ValueError:
            limit_value = -1
        if limit_value < 0 or limit_value > MAX_LIST_LIMIT:
            raise ValidationIssue(
                f"must be a non-negative integer no greater than {MAX_LIST_LIMIT}",
                field="limit",
                error_type="out_of_range",
            )

    return ListArgs(after=starting_after or None, before=ending_before or None, limit=limit_value)


class IssueCollector:
    """Run several field checks and report every failure at once."""

    def __init__(self):
        self.issues: list[ValidationIssue] = []

    def check(self, fn, *args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except ValidationIssue as exc:
            self.issues.append(exc)
            return None

    def add(self, issue: ValidationIssue) -> None:
        self.issues.append(issue)

    def raise_if_any(self) -> None:
        if self.issues:
            raise InvalidParams(self.issues)
