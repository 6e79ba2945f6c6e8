"""
Mood endpoints: built-in and user-defined eye/tongue presets.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Response

from saypi.services.repository import Repository
from saypi.validators import (
    DEFAULT_EYES,
    DEFAULT_TONGUE,
    IssueCollector,
    parse_list_args,
    strip_nul,
    validate_face_part,
)
from app.deps import get_repository, get_user_id
from app.routes.listing import list_response


router = APIRouter(prefix="/moods")


@router.get("")
def list_moods(
    starting_after: Optional[str] = Query(None),
    ending_before: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    args = parse_list_args(starting_after, ending_before, limit)
    page = repository.list_moods(user_id, args)
    return list_response("mood", page, [mood.to_payload() for mood in page.items])


@router.get("/{name}")
def get_mood(
    name: str,
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    return repository.get_mood(user_id, name).to_payload()


@router.put("/{name}")
def set_mood(
    name: str,
    eyes: str = Form(""),
    tongue: str = Form(""),
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    eyes = strip_nul(eyes)
    tongue = strip_nul(tongue)

    issues = IssueCollector()
    issues.check(validate_face_part, eyes, "eyes")
    issues.check(validate_face_part, tongue, "tongue")
    issues.raise_if_any()

    mood = repository.set_mood(
        user_id,
        name,
        eyes or DEFAULT_EYES,
        tongue or DEFAULT_TONGUE,
    )
    return mood.to_payload()


@router.delete("/{name}", status_code=204)
def delete_mood(
    name: str,
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    repository.delete_mood(user_id, name)
    return Response(status_code=204)
