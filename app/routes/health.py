"""
Health endpoint.
"""

from __future__ import annotations

import os

from fastapi import APIRouter, Depends, HTTPException

import saypi.config as config
from saypi.errors import InternalFault
from saypi.services.repository import Repository
from app.deps import get_repository


router = APIRouter()


def _check_db_health(repository: Repository) -> dict:
    backend = repository.database.dialect
    try:
        repository.ping()
    except InternalFault as exc:
        return {"ok": False, "backend": backend, "error": str(exc)}

    try:
        current_rev, head_rev = repository.schema_revisions()
    except Exception as exc:
        config.logger.warning("schema_revision_check_failed", extra={"detail": str(exc)})
        return {"ok": True, "backend": backend, "schema_revision": None}

    schema_ok = head_rev is None or current_rev == head_rev
    return {
        "ok": schema_ok,
        "backend": backend,
        "schema_revision": current_rev,
        "schema_expected": head_rev,
        "schema_up_to_date": schema_ok,
    }


@router.get("/health")
def health(repository: Repository = Depends(get_repository)):
    """Health check endpoint."""
    db_health = _check_db_health(repository)
    if not db_health.get("ok"):
        raise HTTPException(status_code=503, detail={"database": db_health})

    return {
        "status": "healthy",
        "service": "SayAPI",
        "version": "0.1.0",
        "instance_id": os.environ.get("SAYPI_INSTANCE_ID", "saypi-1"),
        "database": db_health,
    }
