import time

import jwt as pyjwt
import pytest

from security import JwtService


def test_round_trip_keeps_claims(jwt_service):
    token = jwt_service.create({"id": "user-1"})
    payload = jwt_service.verify(token)
    assert payload["id"] == "user-1"
    assert payload["exp"] - payload["iat"] == 3600


def test_expired_token_is_rejected(jwt_service):
    token = jwt_service.create({"id": "user-1"}, now=int(time.time()) - 7200)
    assert jwt_service.verify(token) is None
    with pytest.raises(pyjwt.ExpiredSignatureError):
        jwt_service.decode_strict(token)


@pytest.mark.parametrize("token", [None, "", "abc.def.ghi", "not-a-token"])
def test_malformed_tokens_verify_to_none(jwt_service, token):
    assert jwt_service.verify(token) is None


def test_wrong_signature_is_rejected(jwt_service):
    other = JwtService("another-secret-that-is-long-enough-xx")
    assert jwt_service.verify(other.create({"id": "user-1"})) is None


def test_should_refresh_and_refresh():
    service = JwtService("a-secret-that-is-at-least-32-bytes-long", expire=1000, refresh_threshold=600)
    now = int(time.time())
    payload = {"id": "user-1", "exp": now + 500, "iat": now - 500, "nbf": now - 500}
    assert service.should_refresh(payload, now) is True
    assert service.should_refresh({"exp": now + 900}, now) is False

    fresh = service.verify(service.refresh(payload, now))
    assert fresh["id"] == "user-1"
    assert fresh["exp"] == now + 1000


def test_refresh_token_helpers(jwt_service):
    token = jwt_service.create_refresh_token()
    assert len(token) == 64
    assert token != jwt_service.create_refresh_token()
    digest = jwt_service.hash_refresh_token(token)
    assert len(digest) == 64
    assert digest == jwt_service.hash_refresh_token(token)
    assert digest != token


def test_empty_secret_is_refused():
    with pytest.raises(RuntimeError, match="JWT_SECRET is not set"):
        JwtService("")
