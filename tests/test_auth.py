import base64

import pytest

from app.auth import ID_LENGTH, issue_token, verify_token

SECRET = b"shhh"


def test_issued_token_verifies():
    token = issue_token(SECRET)
    user = verify_token(SECRET, token)
    assert user is not None
    raw = base64.urlsafe_b64decode(token)
    assert user.user_id == base64.urlsafe_b64encode(raw[:ID_LENGTH]).decode("ascii")


def test_tokens_are_unique():
    assert issue_token(SECRET) != issue_token(SECRET)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "nope",
        "not base64 at all!",
        "DUtRr7IlHC-fd2wH8tfX_iLM8p8-3yeF4MTbc89B1lt41mk17sOlb6sg3JF_z6Sv",
        "ABCDr7IlHC-fd2wH8tfX_iLM8p8-3yeF4MTbc89B1lt41mk17sOlb6sg3JF_z6Sv",
    ],
)
def test_invalid_tokens_rejected(token):
    assert verify_token(b"a different secret", token) is None


def test_token_from_other_secret_rejected():
    assert verify_token(SECRET, issue_token(b"other")) is None


def test_tampered_token_rejected():
    raw = bytearray(base64.urlsafe_b64decode(issue_token(SECRET)))
    raw[0] ^= 0xFF
    assert verify_token(SECRET, base64.urlsafe_b64encode(bytes(raw)).decode("ascii")) is None
