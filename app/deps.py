"""
Dependency helpers for the FastAPI app.
"""

from __future__ import annotations

from fastapi import Depends, Request

from saypi.context import AuthContext
from saypi.services.cowsay import Renderer
from saypi.services.repository import Repository
from app.auth import get_current_user


def get_repository(request: Request) -> Repository:
    repository = getattr(request.app.state, "repository", None)
    if repository is None:
        raise RuntimeError("Repository not initialized")
    return repository


def get_renderer(request: Request) -> Renderer:
    return request.app.state.renderer


def get_user_id(user: AuthContext = Depends(get_current_user)) -> str:
    return user.user_id
