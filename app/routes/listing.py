"""
Shared list response shape.
"""

from __future__ import annotations

from saypi.entities import ListPage


def list_response(resource_type: str, page: ListPage, data: list) -> dict:
    return {
        "type": resource_type,
        "has_more": page.has_more,
        "cursor": page.cursor,
        "data": data,
    }
