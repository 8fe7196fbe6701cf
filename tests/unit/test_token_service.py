from datetime import UTC, datetime, timedelta

import jwt
import pytest

from src.domain.errors import InvalidToken, TokenSigningError
from src.domain.services.token_service import TokenService

SECRET = "unit-test-secret-key-with-enough-bytes-for-hs256"


def test_issue_and_verify_roundtrip():
    svc = TokenService(SECRET)
    token = svc.issue("user-1")
    assert svc.verify(token).user_id == "user-1"


def test_payload_shape_and_expiry_window():
    svc = TokenService(SECRET)
    payload = jwt.decode(svc.issue("user-1"), SECRET, algorithms=["HS256"])
    assert payload["user"] == {"id": "user-1"}
    assert payload["exp"] - payload["iat"] == 36000


def test_tampered_token_rejected():
    svc = TokenService(SECRET)
    head, _, sig = svc.issue("user-1").split(".")
    _, forged_body, _ = svc.issue("user-2").split(".")
    tampered = ".".join([head, forged_body, sig])
    with pytest.raises(InvalidToken):
        svc.verify(tampered)


def test_token_signed_with_other_secret_rejected():
    other = TokenService("another-secret-key-with-enough-bytes-for-hs256").issue("user-1")
    with pytest.raises(InvalidToken):
        TokenService(SECRET).verify(other)


def test_expired_token_rejected():
    svc = TokenService(SECRET, expires_in=-10)
    with pytest.raises(InvalidToken):
        svc.verify(svc.issue("user-1"))


def test_garbage_token_rejected():
    with pytest.raises(InvalidToken):
        TokenService(SECRET).verify("not-a-jwt")


@pytest.mark.parametrize("payload", [{}, {"user": "user-1"}, {"user": {"id": 42}}, {"user": {}}])
def test_payload_without_user_id_rejected(payload):
    now = datetime.now(UTC)
    token = jwt.encode({**payload, "iat": now, "exp": now + timedelta(minutes=5)}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidToken):
        TokenService(SECRET).verify(token)


def test_missing_secret_is_a_server_error():
    with pytest.raises(TokenSigningError):
        TokenService(None).issue("user-1")
    with pytest.raises(TokenSigningError):
        TokenService("").verify("whatever")
