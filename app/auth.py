"""
Bearer token authentication.

A token is ``urlsafe_b64(id || HMAC-SHA256(secret, id))`` for a random
16-byte id. The user id is the urlsafe base64 encoding of the id alone.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
from typing import Optional

from fastapi import Request

import saypi.config as config
from saypi.context import AuthContext

ID_LENGTH = 16
_MAC_LENGTH = hashlib.sha256().digest_size


class AuthError(Exception):
    code = "auth_invalid"
    message = "the authorization token you provided is invalid"

    def __init__(self):
        super().__init__(self.message)


class AuthRequired(AuthError):
    code = "auth_required"
    message = "you must provide a Bearer token in an Authorization header"


class AuthInvalid(AuthError):
    pass


def _mac(secret: bytes, raw_id: bytes) -> bytes:
    return hmac.new(secret, raw_id, hashlib.sha256).digest()


def issue_token(secret: bytes) -> str:
    raw_id = secrets.token_bytes(ID_LENGTH)
    return base64.urlsafe_b64encode(raw_id + _mac(secret, raw_id)).decode("ascii")


def verify_token(secret: bytes, token: str) -> Optional[AuthContext]:
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
    except (ValueError, UnicodeEncodeError):
        return None
    if len(raw) != ID_LENGTH + _MAC_LENGTH:
        return None
    raw_id, given_mac = raw[:ID_LENGTH], raw[ID_LENGTH:]
    if not hmac.compare_digest(given_mac, _mac(secret, raw_id)):
        return None
    return AuthContext(user_id=base64.urlsafe_b64encode(raw_id).decode("ascii"))


def get_current_user(request: Request) -> AuthContext:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer "):
        raise AuthRequired()
    user = verify_token(request.app.state.user_secret, header[len("Bearer "):])
    if user is None:
        raise AuthInvalid()
    return user
