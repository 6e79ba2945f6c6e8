"""
Animal listing endpoint.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from saypi.services.cowsay import Renderer
from app.deps import get_renderer, get_user_id


router = APIRouter()


@router.get("/animals")
def get_animals(
    user_id: str = Depends(get_user_id),
    renderer: Renderer = Depends(get_renderer),
):
    return {"animals": renderer.animals()}
