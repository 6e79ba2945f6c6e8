"""
Conversation and line endpoints.

Lines are rendered on every read so they always reflect the current eyes and
tongue of their mood.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Form, Query, Response

from saypi.entities import LineEntry
from saypi.errors import NotFound, ValidationIssue
from saypi.services.builtins import DEFAULT_MOOD_NAME
from saypi.services.cowsay import DEFAULT_ANIMAL, Renderer
from saypi.services.repository import Repository
from saypi.validators import (
    IssueCollector,
    parse_list_args,
    parse_think,
    strip_nul,
    validate_heading,
    validate_text,
)
from app.deps import get_renderer, get_repository, get_user_id
from app.routes.listing import list_response


router = APIRouter(prefix="/conversations")


def _line_payload(line: LineEntry, renderer: Renderer) -> dict:
    output = renderer.render(line.animal, line.text, line.eyes, line.tongue, line.think)
    return line.to_payload(output=output)


@router.get("")
def list_conversations(
    starting_after: Optional[str] = Query(None),
    ending_before: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    args = parse_list_args(starting_after, ending_before, limit)
    page = repository.list_conversations(user_id, args)
    return list_response(
        "conversation",
        page,
        [conversation.to_payload() for conversation in page.items],
    )


@router.post("")
def create_conversation(
    heading: str = Form(""),
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    heading = strip_nul(heading)
    validate_heading(heading)
    return repository.new_conversation(user_id, heading).to_payload()


@router.get("/{conversation_id}")
def get_conversation(
    conversation_id: str,
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
    renderer: Renderer = Depends(get_renderer),
):
    conversation = repository.get_conversation(user_id, conversation_id)
    payload = conversation.to_payload()
    if conversation.lines:
        payload["lines"] = [_line_payload(line, renderer) for line in conversation.lines]
    return payload


@router.delete("/{conversation_id}", status_code=204)
def delete_conversation(
    conversation_id: str,
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    repository.delete_conversation(user_id, conversation_id)
    return Response(status_code=204)


@router.post("/{conversation_id}/lines")
def create_line(
    conversation_id: str,
    animal: str = Form(""),
    think: str = Form(""),
    mood: str = Form(""),
    text: str = Form(""),
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
    renderer: Renderer = Depends(get_renderer),
):
    issues = IssueCollector()

    think_value = issues.check(parse_think, think)

    animal = animal or DEFAULT_ANIMAL
    if not renderer.has_animal(animal):
        issues.add(ValidationIssue(f"{animal!r} does not exist", field="animal", error_type="not_found"))

    text = strip_nul(text)
    issues.check(validate_text, text)

    mood_name = strip_nul(mood) or DEFAULT_MOOD_NAME
    try:
        repository.get_mood(user_id, mood_name)
    except NotFound:
        issues.add(ValidationIssue(f"{mood_name!r} does not exist", field="mood", error_type="not_found"))

    issues.raise_if_any()

    line = repository.insert_line(
        user_id,
        conversation_id,
        animal=animal,
        think=bool(think_value),
        mood_name=mood_name,
        text=text,
    )
    return _line_payload(line, renderer)


@router.get("/{conversation_id}/lines/{line_id}")
def get_line(
    conversation_id: str,
    line_id: str,
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
    renderer: Renderer = Depends(get_renderer),
):
    line = repository.get_line(user_id, conversation_id, line_id)
    return _line_payload(line, renderer)


@router.delete("/{conversation_id}/lines/{line_id}", status_code=204)
def delete_line(
    conversation_id: str,
    line_id: str,
    user_id: str = Depends(get_user_id),
    repository: Repository = Depends(get_repository),
):
    repository.delete_line(user_id, conversation_id, line_id)
    return Response(status_code=204)
