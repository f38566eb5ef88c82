# tests/conftest.py
import json
import os
import sys

import pytest

# make `from app import create_app` work when pytest runs from the repo root
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from app import create_app  # noqa: E402
from cookies import CookieManager, MemoryCookieStorage  # noqa: E402
from extensions import db  # noqa: E402
from modules.api.request import Request  # noqa: E402
from modules.api.router import Router  # noqa: E402
from modules.api.router_app import RouterApp  # noqa: E402
from security import JwtService  # noqa: E402

TEST_JWT_SECRET = "test-jwt-secret-with-at-least-32-bytes!!"


@pytest.fixture()
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SECRET_KEY": "test-secret",
        "JWT_SECRET": TEST_JWT_SECRET,
        "COOKIE_SECURE": False,       # the test client talks plain http
        "CORS_ALLOWED_ORIGINS": [],
    })
    with app.app_context():
        db.create_all()
        yield app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def jwt_service():
    return JwtService(TEST_JWT_SECRET)


@pytest.fixture()
def cookie_manager():
    return CookieManager(MemoryCookieStorage())


@pytest.fixture()
def router_app(app, jwt_service, cookie_manager):
    """RouterApp dispatching without Flask: cookies live in memory."""
    return RouterApp(Router(), db.session, jwt_service, cookie_manager)


@pytest.fixture()
def make_request():
    def _make(method="GET", path="/", body=None, query=None, params=None, auth=None):
        raw = json.dumps(body) if body is not None else ""
        req = Request(method=method, path=path, query=query, raw_input=raw)
        req.params.update(params or {})
        req.auth = auth
        return req

    return _make
