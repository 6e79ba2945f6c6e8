"""
User token endpoints.

There is no user table: a user is whoever holds a token signed with the
service secret.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from saypi.errors import NotFound
from app.auth import issue_token, verify_token


router = APIRouter(prefix="/users")


@router.post("")
async def create_user(request: Request):
    """Issue a new bearer token."""
    return {"id": issue_token(request.app.state.user_secret)}


@router.get("/{token}", status_code=204)
async def get_user(token: str, request: Request):
    """204 when the token is valid, 404 otherwise."""
    if verify_token(request.app.state.user_secret, token) is None:
        raise NotFound("user")
    return Response(status_code=204)
