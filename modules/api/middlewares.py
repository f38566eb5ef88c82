"""Request middlewares: authentication, debug logging and CORS headers."""

import json
import logging
import time

from .errors import UnauthorizedError

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = ("password", "token", "secret", "authorization", "cookie", "session")


class AuthMiddleware:
    def __init__(self, cookie_manager, jwt):
        self.cookie_manager = cookie_manager
        self.jwt = jwt

    def refresh_jwt(self, req, now: int | None = None) -> None:
        """
        Attach the access-token payload to ``req.auth``; anonymous requests get None.
        A token close to expiry is re-issued so active sessions keep sliding.
        """
        now = int(time.time()) if now is None else int(now)
        payload = self.jwt.verify(self.cookie_manager.get_access_token())
        if not payload:
            req.auth = None
            return

        req.auth = payload
        if self.jwt.should_refresh(payload, now):
            token = self.jwt.refresh(payload, now)
            self.cookie_manager.set_access_token(token, now + self.jwt.expire)
            logger.info("Access token refreshed for user %s", payload.get("id"))

    def require_auth(self, req) -> None:
        if not req.auth:
            raise UnauthorizedError("Unauthorized. You must be logged in.")


def sanitize(data):
    if isinstance(data, dict):
        cleaned = {}
        for key, value in data.items():
            if isinstance(value, (dict, list)):
                cleaned[key] = sanitize(value)
            elif isinstance(key, str) and key.lower() in SENSITIVE_KEYS:
                cleaned[key] = "***"
            else:
                cleaned[key] = value
        return cleaned
    if isinstance(data, list):
        return [sanitize(item) for item in data]
    return data


class DebugMiddleware:
    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def __call__(self, req) -> None:
        self.log.info("Request %s %s", req.method, req.path)
        self.log.info("Query params: %s", json.dumps(sanitize(req.query), default=str))
        self.log.info("Body params: %s", json.dumps(sanitize(req.body), default=str))
        if req.params:
            self.log.info("Route params: %s", json.dumps(req.params, default=str))
        if req.json_error is not None:
            self.log.warning("JSON decode error: %s", req.json_error)


class CorsMiddleware:
    ALLOW_METHODS = "GET, POST, PUT, PATCH, DELETE, OPTIONS"
    ALLOW_HEADERS = "Content-Type, Authorization, X-Requested-With"
    MAX_AGE = "86400"

    def __init__(self, allowed_origins=None):
        self.allowed_origins = list(allowed_origins or [])

    def allow_origin(self, origin: str | None) -> str | None:
        if self.allowed_origins:
            return origin if origin in self.allowed_origins else "null"
        return origin or None

    def headers(self, origin: str | None) -> dict:
        headers = {
            "Access-Control-Allow-Methods": self.ALLOW_METHODS,
            "Access-Control-Allow-Headers": self.ALLOW_HEADERS,
            "Access-Control-Allow-Credentials": "true",
            "Access-Control-Max-Age": self.MAX_AGE,
        }
        # without an origin there is nothing to echo
        allow = self.allow_origin(origin)
        if allow is not None:
            headers["Access-Control-Allow-Origin"] = allow
        return headers

    def apply(self, response, origin: str | None):
        response.headers.update(self.headers(origin))
        return response
