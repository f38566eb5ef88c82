import logging
import time

import pytest

from modules.api.errors import UnauthorizedError
from modules.api.middlewares import AuthMiddleware, CorsMiddleware, DebugMiddleware, sanitize
from modules.api.request import Request


@pytest.fixture()
def auth(cookie_manager, jwt_service):
    return AuthMiddleware(cookie_manager, jwt_service)


def test_refresh_jwt_without_cookie_is_anonymous(auth):
    req = Request("GET", "/v1/tasks")
    auth.refresh_jwt(req)
    assert req.auth is None


def test_refresh_jwt_with_garbage_cookie_is_anonymous(auth, cookie_manager):
    cookie_manager.set_access_token("not-a-jwt", int(time.time()) + 60)
    req = Request("GET", "/v1/tasks")
    auth.refresh_jwt(req)
    assert req.auth is None


def test_refresh_jwt_attaches_payload_without_reissuing(auth, cookie_manager, jwt_service):
    token = jwt_service.create({"id": "user-1"})
    cookie_manager.set_access_token(token, int(time.time()) + 3600)
    cookie_manager.last_set_cookie_name = None

    req = Request("GET", "/v1/tasks")
    auth.refresh_jwt(req)
    assert req.auth["id"] == "user-1"
    assert cookie_manager.last_set_cookie_name is None
    assert cookie_manager.get_access_token() == token


def test_refresh_jwt_reissues_token_close_to_expiry(auth, cookie_manager, jwt_service):
    # issued 3500s ago: 100s left, inside the 600s refresh window
    old = jwt_service.create({"id": "user-1"}, now=int(time.time()) - 3500)
    cookie_manager.set_access_token(old, int(time.time()) + 100)

    req = Request("GET", "/v1/tasks")
    auth.refresh_jwt(req)

    new = cookie_manager.get_access_token()
    assert req.auth["id"] == "user-1"
    assert new != old
    assert jwt_service.verify(new)["id"] == "user-1"


def test_require_auth(auth):
    req = Request("GET", "/v1/users/me")
    with pytest.raises(UnauthorizedError, match="You must be logged in"):
        auth.require_auth(req)

    req.auth = {"id": "user-1"}
    auth.require_auth(req)


def test_sanitize_masks_nested_sensitive_keys():
    data = {"username": "alice", "Password": "secret123", "nested": {"token": "abc", "ok": 1}}
    assert sanitize(data) == {"username": "alice", "Password": "***", "nested": {"token": "***", "ok": 1}}


def test_debug_middleware_never_logs_passwords(caplog):
    req = Request("POST", "/v1/users/signin", raw_input='{"username": "alice", "password": "hunter2"}')
    with caplog.at_level(logging.INFO, logger="modules.api.middlewares"):
        DebugMiddleware()(req)
    assert "alice" in caplog.text
    assert "hunter2" not in caplog.text


def test_debug_middleware_warns_on_bad_json(caplog):
    req = Request("POST", "/v1/tasks", raw_input='{"title": ')
    with caplog.at_level(logging.INFO, logger="modules.api.middlewares"):
        DebugMiddleware()(req)
    assert any(r.levelno == logging.WARNING for r in caplog.records)


@pytest.mark.parametrize(
    "allowed, origin, expected",
    [
        ([], "http://localhost:5173", "http://localhost:5173"),
        (["https://todo.example"], "https://todo.example", "https://todo.example"),
        (["https://todo.example"], "https://evil.example", "null"),
    ],
)
def test_cors_allow_origin(allowed, origin, expected):
    headers = CorsMiddleware(allowed).headers(origin)
    assert headers["Access-Control-Allow-Origin"] == expected
    assert headers["Access-Control-Allow-Credentials"] == "true"
    assert "PATCH" in headers["Access-Control-Allow-Methods"]


def test_cors_without_origin_omits_allow_origin():
    headers = CorsMiddleware([]).headers(None)
    assert "Access-Control-Allow-Origin" not in headers
    assert headers["Access-Control-Allow-Credentials"] == "true"
