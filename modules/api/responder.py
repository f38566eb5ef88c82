"""JSON envelope builder: {success, type, message, data, totalPages?}."""

from flask import jsonify

from .errors import ApiError

RESPONSE_TYPES = ("success", "error", "info")


class JsonResponder:
    def __init__(self, success: bool, message: str, response_type: str = "", http_status: int | None = None):
        self.success = success
        self.message = message
        if not response_type:
            response_type = "success" if success else "error"
        if response_type not in RESPONSE_TYPES:
            response_type = "info"
        self.type = response_type
        self.data: dict = {}
        self.total_pages: int | None = None
        self.http_status = http_status if http_status is not None else (200 if success else 400)

    # ---------- constructors ----------
    @classmethod
    def success(cls, message: str, response_type: str = "", http_status: int | None = None) -> "JsonResponder":
        return cls(True, message, response_type, http_status)

    @classmethod
    def error(cls, message: str, response_type: str = "", http_status: int | None = None) -> "JsonResponder":
        return cls(False, message, response_type, http_status)

    @classmethod
    def info(cls, message: str, http_status: int | None = None) -> "JsonResponder":
        return cls(False, message, "info", http_status)

    @classmethod
    def from_error(cls, exc: ApiError) -> "JsonResponder":
        return cls.error(exc.public_message, http_status=exc.status)

    # ---------- fluent setters ----------
    def with_data(self, data: dict) -> "JsonResponder":
        self.data = data
        return self

    def with_payload(self, data: dict) -> "JsonResponder":
        return self.with_data(data)

    def with_total_pages(self, total_pages: int) -> "JsonResponder":
        self.total_pages = total_pages
        return self

    def with_type(self, response_type: str) -> "JsonResponder":
        if response_type in RESPONSE_TYPES:
            self.type = response_type
        return self

    def with_http_status(self, status: int) -> "JsonResponder":
        self.http_status = status
        return self

    # ---------- output ----------
    def to_dict(self) -> dict:
        body = {
            "success": self.success,
            "type": self.type,
            "message": self.message,
            "data": self.data,
        }
        if self.total_pages is not None:
            body["totalPages"] = self.total_pages
        return body

    def to_response(self):
        """Flask response; needs an application context."""
        response = jsonify(self.to_dict())
        response.status_code = self.http_status
        return response
