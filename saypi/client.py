"""
HTTP client for a SayAPI server.

Calls return the decoded JSON payloads. Failures surface as ``ApiError``
carrying the ``{code, error, data}`` envelope the server renders.
"""

from __future__ import annotations

from typing import Any, Iterator, Optional

import httpx


class ApiError(Exception):
    """Non-2xx response from the server."""

    def __init__(self, status_code: int, code: str, message: str, data: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.data = data


class Client:
    """Thin wrapper over an ``httpx.Client`` pointed at a SayAPI server.

    Pass ``http`` to reuse an existing client (a Starlette ``TestClient`` works);
    otherwise one is created for ``base_url`` and closed by ``close()``.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8080",
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self._owns_http = http is None
        self._http = http if http is not None else httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def close(self) -> None:
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict] = None,
        data: Optional[dict] = None,
    ) -> Optional[dict]:
        headers = {}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self._http.request(method, path, params=params, data=data, headers=headers)
        if response.is_success:
            if response.status_code == 204 or not response.content:
                return None
            return response.json()
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        raise ApiError(
            response.status_code,
            str(body.get("code") or "unknown"),
            str(body.get("error") or response.reason_phrase),
            body.get("data"),
        )

    def iter_list(
        self,
        path: str,
        starting_after: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Iterator[dict]:
        """Yield every item of a list endpoint, following ``has_more`` forward."""
        cursor = starting_after
        while True:
            params: dict = {}
            if cursor:
                params["starting_after"] = cursor
            if limit is not None:
                params["limit"] = str(limit)
            page = self._request("GET", path, params=params)
            yield from page["data"]
            cursor = page.get("cursor")
            if not page.get("has_more") or not cursor:
                return

    # Users

    def create_user(self) -> str:
        """Issue a token and use it for later calls."""
        self.token = self._request("POST", "/users")["id"]
        return self.token

    def user_exists(self, token: str) -> bool:
        try:
            self._request("GET", f"/users/{token}")
        except ApiError as exc:
            if exc.status_code == 404:
                return False
            raise
        return True

    def get_animals(self) -> list[str]:
        return self._request("GET", "/animals")["animals"]

    # Moods

    def list_moods(self, starting_after: Optional[str] = None, limit: Optional[int] = None) -> Iterator[dict]:
        return self.iter_list("/moods", starting_after=starting_after, limit=limit)

    def set_mood(self, name: str, eyes: str = "", tongue: str = "") -> dict:
        return self._request("PUT", f"/moods/{name}", data={"eyes": eyes, "tongue": tongue})

    def get_mood(self, name: str) -> dict:
        return self._request("GET", f"/moods/{name}")

    def delete_mood(self, name: str) -> None:
        self._request("DELETE", f"/moods/{name}")

    # Conversations

    def list_conversations(
        self, starting_after: Optional[str] = None, limit: Optional[int] = None
    ) -> Iterator[dict]:
        return self.iter_list("/conversations", starting_after=starting_after, limit=limit)

    def create_conversation(self, heading: str = "") -> dict:
        return self._request("POST", "/conversations", data={"heading": heading})

    def get_conversation(self, conversation_id: str) -> dict:
        return self._request("GET", f"/conversations/{conversation_id}")

    def delete_conversation(self, conversation_id: str) -> None:
        self._request("DELETE", f"/conversations/{conversation_id}")

    # Lines

    def create_line(
        self,
        conversation_id: str,
        text: str,
        animal: str = "",
        mood: str = "",
        think: bool = False,
    ) -> dict:
        form = {"text": text, "animal": animal, "mood": mood, "think": "true" if think else "false"}
        return self._request("POST", f"/conversations/{conversation_id}/lines", data=form)

    def get_line(self, conversation_id: str, line_id: str) -> dict:
        return self._request("GET", f"/conversations/{conversation_id}/lines/{line_id}")

    def delete_line(self, conversation_id: str, line_id: str) -> None:
        self._request("DELETE", f"/conversations/{conversation_id}/lines/{line_id}")
