"""
Root endpoint with service metadata.
"""

from __future__ import annotations

from fastapi import APIRouter

import saypi.config as config


router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": "SayAPI",
        "version": "0.1.0",
        "description": "Cowsay conversations over HTTP",
        "db_backend": config.DB_BACKEND,
        "endpoints": {
            "health": "/health",
            "users": "/users",
            "animals": "/animals",
            "moods": "/moods",
            "conversations": "/conversations",
        },
    }
