"""Error taxonomy shared by services, middlewares and the router.

Each error carries an ``ErrorKind``. The router maps the kind to an HTTP status
and to the message the client sees; ``INTERNAL`` errors never expose their
detail, it only goes to the log.
"""

from enum import Enum

INTERNAL_ERROR_MESSAGE = "Internal server error"


class ErrorKind(Enum):
    VALIDATION = "validation"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INTERNAL = "internal"


HTTP_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class ApiError(Exception):
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status(self) -> int:
        return HTTP_STATUS[self.kind]

    @property
    def public_message(self) -> str:
        if self.kind is ErrorKind.INTERNAL:
            return INTERNAL_ERROR_MESSAGE
        return self.message


class ValidationError(ApiError):
    kind = ErrorKind.VALIDATION


class UnauthorizedError(ApiError):
    kind = ErrorKind.UNAUTHORIZED


class InvalidTokenError(UnauthorizedError):
    """Refresh token unknown, already rotated or expired."""


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT


class InternalError(ApiError):
    kind = ErrorKind.INTERNAL
