"""
Exception handlers rendering typed failures as the JSON error envelope.

Envelope: ``{"code": ..., "error": ..., "data": ...}`` with ``data`` omitted
when there is nothing machine-readable to add.
"""

from __future__ import annotations

import secrets

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

import saypi.config as config
from saypi.context import current_request_id
from saypi.errors import (
    CursorNotFound,
    HasDependents,
    InternalFault,
    InvalidParams,
    NotFound,
    ProtectedEntity,
    ValidationIssue,
)
from app.auth import AuthError


def error_response(status_code: int, code: str, message: str, data=None) -> JSONResponse:
    content = {"code": code, "error": message}
    if data is not None:
        content["data"] = data
    return JSONResponse(status_code=status_code, content=content)


def _params_data(issues) -> list[dict]:
    return [
        {"message": str(issue), "params": [part.strip() for part in issue.field.split(",")]}
        for issue in issues
    ]


async def _invalid_params_handler(request: Request, exc: InvalidParams) -> JSONResponse:
    return error_response(400, exc.code, str(exc), _params_data(exc.issues))


async def _validation_issue_handler(request: Request, exc: ValidationIssue) -> JSONResponse:
    config.logger.info(
        "request_validation_error",
        extra={"field": exc.field, "error_type": exc.error_type, "detail": str(exc)},
    )
    return error_response(400, exc.code, f"{exc.field}: {exc}.", _params_data([exc]))


async def _cursor_not_found_handler(request: Request, exc: CursorNotFound) -> JSONResponse:
    issue = ValidationIssue("must refer to an existing object", field=exc.param, error_type="not_found")
    return error_response(400, exc.code, f"{issue.field}: {issue}.", _params_data([issue]))


async def _protected_entity_handler(request: Request, exc: ProtectedEntity) -> JSONResponse:
    return error_response(400, exc.code, str(exc), {"action": f"{exc.action} built-in {exc.resource} {exc.key}"})


async def _has_dependents_handler(request: Request, exc: HasDependents) -> JSONResponse:
    return error_response(
        409,
        exc.code,
        str(exc),
        {"action": f"delete {exc.resource} {exc.key}", "dependents": exc.count},
    )


async def _not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
    return error_response(404, exc.code, str(exc))


async def _internal_fault_handler(request: Request, exc: Exception) -> JSONResponse:
    incident_id = secrets.token_hex(8)
    config.logger.error(
        "internal_fault",
        exc_info=exc,
        extra={
            "incident_id": incident_id,
            "request_id": current_request_id(),
            "path": request.url.path,
        },
    )
    return error_response(500, InternalFault.code, "Internal Server Error", {"id": incident_id})


async def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return error_response(401, exc.code, str(exc))


def configure_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidParams, _invalid_params_handler)
    app.add_exception_handler(ValidationIssue, _validation_issue_handler)
    app.add_exception_handler(CursorNotFound, _cursor_not_found_handler)
    app.add_exception_handler(ProtectedEntity, _protected_entity_handler)
    app.add_exception_handler(HasDependents, _has_dependents_handler)
    app.add_exception_handler(NotFound, _not_found_handler)
    app.add_exception_handler(InternalFault, _internal_fault_handler)
    app.add_exception_handler(Exception, _internal_fault_handler)
    app.add_exception_handler(AuthError, _auth_error_handler)
