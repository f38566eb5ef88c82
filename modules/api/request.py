"""Request value object built once per call from the transport."""

import json
from typing import Any
from urllib.parse import parse_qsl, urlsplit

from utils import is_digits

TRUE_STRINGS = {"1", "true", "yes", "on"}


def _to_int(value, default):
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if is_digits(text[1:] if text.startswith("-") else text):
        return int(text)
    return default


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUE_STRINGS


def _parse_urlencoded(raw: str) -> dict:
    parsed: dict = {}
    for key, value in parse_qsl(raw, keep_blank_values=True):
        if key.endswith("[]"):
            parsed.setdefault(key[:-2], []).append(value)
        else:
            parsed[key] = value
    return parsed


class Request:
    """
    Normalized inbound request.

    ``method``, ``path``, ``query``, ``body`` and ``files`` are fixed at
    construction. ``params`` is filled by the router when a templated route
    matches and ``auth`` by the authentication middleware.
    """

    def __init__(
        self,
        method: str | None = None,
        path: str | None = None,
        query: dict | None = None,
        raw_input: str | None = None,
        form: dict | None = None,
        files: dict | None = None,
    ):
        self.method = (method or "GET").upper()
        self.path = urlsplit(path or "/").path or "/"
        self.query = {str(k): v for k, v in (query or {}).items()}
        self.files = dict(files or {})
        self.json_error: str | None = None
        self.body = self._parse_body(raw_input or "", form or {})
        self.params: dict = {}
        self.auth: dict | None = None

    @classmethod
    def from_flask(cls, flask_request) -> "Request":
        # parse_form_data=True lets werkzeug consume form/multipart bodies first,
        # so the raw text is only what the form parser did not handle (JSON etc.)
        raw = flask_request.get_data(cache=True, as_text=True, parse_form_data=True)
        return cls(
            method=flask_request.method,
            path=flask_request.path,
            query=flask_request.args.to_dict(),
            raw_input=raw,
            form=flask_request.form.to_dict(),
            files=flask_request.files.to_dict(),
        )

    def _parse_body(self, raw: str, form: dict) -> dict:
        if raw.strip():
            try:
                decoded = json.loads(raw)
            except ValueError as exc:
                decoded = None
                if raw.lstrip()[:1] in ("{", "["):
                    self.json_error = str(exc)
            if isinstance(decoded, dict):
                return {str(k): v for k, v in decoded.items()}
            if "=" in raw:
                return _parse_urlencoded(raw)
        return {str(k): v for k, v in form.items()}

    # ---------- raw lookups ----------
    def get_param(self, key: str, default: Any = None) -> Any:
        value = self.params.get(key)
        return default if value is None else value

    def get_query(self, key: str, default: Any = None) -> Any:
        value = self.query.get(key)
        return default if value is None else value

    def get_body_value(self, key: str, default: Any = None) -> Any:
        value = self.body.get(key)
        return default if value is None else value

    # ---------- typed accessors ----------
    def get_int_query(self, key: str, default: int = 0) -> int:
        value = self.get_query(key)
        return default if value is None else _to_int(value, default)

    def get_string_query(self, key: str, default: str = "") -> str:
        value = self.get_query(key)
        return default if value is None else str(value)

    def get_bool_query(self, key: str, default: bool = False) -> bool:
        value = self.get_query(key)
        return default if value is None else _to_bool(value)

    def get_int_body(self, key: str, default: int = 0) -> int:
        value = self.get_body_value(key)
        return default if value is None else _to_int(value, default)

    def get_string_body(self, key: str, default: str = "") -> str:
        value = self.get_body_value(key)
        return default if value is None else str(value)

    def get_bool_body(self, key: str, default: bool = False) -> bool:
        value = self.get_body_value(key)
        return default if value is None else _to_bool(value)

    def __repr__(self) -> str:  # pragma: no cover - debug helper
        return f"<Request {self.method} {self.path}>"
