"""
Shared error types for SayAPI services.

Every client-meaningful outcome of a repository call is one of the classes
below. Raw driver errors never leave ``saypi.services``: they are classified
in ``saypi.services.constraints`` and re-raised as one of these types, or
wrapped as ``InternalFault``.
"""

from __future__ import annotations

from typing import Optional, Sequence


class ValidationIssue(ValueError):
    code = "invalid_params"

    def __init__(
        self,
        message: str,
        field: str = "unknown",
        error_type: str = "invalid",
        error_code: str | None = None,
        data: dict | None = None,
    ):
        super().__init__(message)
        self.field = field
        self.error_type = error_type
        self.error_code = error_code
        self.data = data


class InvalidParams(ValueError):
    """A batch of ValidationIssues reported together."""

    code = "invalid_params"

    def __init__(self, issues: Sequence[ValidationIssue]):
        self.issues = list(issues)
        super().__init__(" ".join(f"{issue.field}: {issue}." for issue in self.issues))


class RepositoryError(Exception):
    """Base class for typed repository failures."""

    code = "internal_failure"


class CursorNotFound(RepositoryError):
    code = "invalid_params"

    def __init__(self, cursor: str, descending: bool = False):
        self.cursor = cursor
        self.descending = descending
        super().__init__(f"cursor {cursor!r} does not refer to an existing object")

    @property
    def param(self) -> str:
        return "ending_before" if self.descending else "starting_after"


class ProtectedEntity(RepositoryError):
    code = "action_not_allowed"

    def __init__(self, action: str, resource: str, key: str):
        self.action = action
        self.resource = resource
        self.key = key
        super().__init__(f"you may not {action} built-in {resource} {key}")


class HasDependents(RepositoryError):
    code = "action_not_allowed"

    def __init__(self, resource: str, key: str, dependent: str, count: int):
        self.resource = resource
        self.key = key
        self.dependent = dependent
        self.count = count
        super().__init__(
            f"you may not delete {resource} {key} because it is referenced by {count} {dependent}"
        )


class NotFound(RepositoryError):
    code = "not_found"

    def __init__(self, resource: str, key: Optional[str] = None):
        self.resource = resource
        self.key = key
        super().__init__("the requested resource could not be found")


class InternalFault(RepositoryError):
    """Store unavailable, identifier space exhausted, or an unclassified store error."""

    code = "internal_failure"
