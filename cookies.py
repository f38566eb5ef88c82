"""Auth cookie access behind a swappable storage."""

from flask import g, request

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"


class MemoryCookieStorage:
    """Plain dict storage, used when dispatching outside a Flask request."""

    def __init__(self, initial: dict | None = None):
        self.cookies = dict(initial or {})
        self.expires: dict = {}

    def get(self, name: str) -> str | None:
        return self.cookies.get(name)

    def set(self, name: str, value: str, expires: int) -> None:
        self.cookies[name] = value
        self.expires[name] = expires

    def delete(self, name: str) -> None:
        self.cookies.pop(name, None)
        self.expires.pop(name, None)


class FlaskCookieStorage:
    """
    Reads cookies from the current Flask request and queues writes in ``g``.
    ``apply()`` copies the queued writes onto the outgoing response.
    """

    def __init__(self, secure: bool = True, samesite: str = "Strict"):
        self.secure = secure
        self.samesite = samesite

    @staticmethod
    def _pending() -> dict:
        return g.setdefault("pending_cookies", {})

    def get(self, name: str) -> str | None:
        pending = self._pending()
        if name in pending:
            entry = pending[name]
            return entry[0] if entry else None
        return request.cookies.get(name)

    def set(self, name: str, value: str, expires: int) -> None:
        self._pending()[name] = (value, expires)

    def delete(self, name: str) -> None:
        self._pending()[name] = None

    def apply(self, response):
        for name, entry in g.pop("pending_cookies", {}).items():
            if entry is None:
                response.delete_cookie(name, path="/", secure=self.secure, httponly=True, samesite=self.samesite)
            else:
                value, expires = entry
                response.set_cookie(
                    name,
                    value,
                    expires=expires,
                    path="/",
                    secure=self.secure,
                    httponly=True,
                    samesite=self.samesite,
                )
        return response


class CookieManager:
    def __init__(self, storage=None):
        self.storage = storage if storage is not None else FlaskCookieStorage()
        self.last_set_cookie_name: str | None = None

    def get_access_token(self) -> str | None:
        return self.storage.get(ACCESS_TOKEN_COOKIE)

    def set_access_token(self, token: str, expires: int) -> None:
        self.last_set_cookie_name = ACCESS_TOKEN_COOKIE
        self.storage.set(ACCESS_TOKEN_COOKIE, token, expires)

    def clear_access_token(self) -> None:
        self.last_set_cookie_name = ACCESS_TOKEN_COOKIE
        self.storage.delete(ACCESS_TOKEN_COOKIE)

    def get_refresh_token(self) -> str | None:
        return self.storage.get(REFRESH_TOKEN_COOKIE)

    def set_refresh_token(self, token: str, expires: int) -> None:
        self.last_set_cookie_name = REFRESH_TOKEN_COOKIE
        self.storage.set(REFRESH_TOKEN_COOKIE, token, expires)

    def clear_refresh_token(self) -> None:
        self.last_set_cookie_name = REFRESH_TOKEN_COOKIE
        self.storage.delete(REFRESH_TOKEN_COOKIE)
