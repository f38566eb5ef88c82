"""
Typed lookups over a ``Request`` plus the check every service runs on a
``QueryResult``.

Values are searched in route params, then the query string, then the body.
Failures raise ``ValidationError`` with the caller's message so the router
turns them into a 400 envelope.
"""

from email_validator import EmailNotValidError, validate_email

from modules.api.errors import InternalError, NotFoundError, UnauthorizedError, ValidationError
from utils import clean_text, is_digits, is_scalar

BOOL_TRUE = {"true", "1"}
BOOL_FALSE = {"false", "0"}


class RequestValidator:
    @staticmethod
    def _find_raw(req, key: str):
        for value in (req.get_param(key), req.get_query(key), req.get_body_value(key)):
            if value is not None:
                return value
        return None

    @staticmethod
    def get_int(req, key: str, error_msg: str) -> int:
        value = RequestValidator._find_raw(req, key)
        if isinstance(value, bool) or not is_scalar(value) or not is_digits(str(value)):
            raise ValidationError(error_msg)
        return int(value)

    @staticmethod
    def get_string(req, key: str, error_msg: str, clean: bool = True) -> str:
        value = RequestValidator._find_raw(req, key)
        if not is_scalar(value):
            raise ValidationError(error_msg)
        text = clean_text(str(value)) if clean else str(value).strip()
        if not text:
            raise ValidationError(error_msg)
        return text

    @staticmethod
    def get_email(req, key: str, error_msg: str) -> str:
        value = RequestValidator._find_raw(req, key)
        if not is_scalar(value):
            raise ValidationError(error_msg)
        text = clean_text(str(value))
        if not text:
            raise ValidationError(error_msg)
        try:
            validate_email(text, check_deliverability=False)
        except EmailNotValidError as exc:
            raise ValidationError(error_msg) from exc
        return text

    @staticmethod
    def get_bool(req, key: str, error_msg: str, normalize_invalid: bool = False) -> bool:
        """
        Accepts real booleans, 0/1 and the strings "true"/"false"/"1"/"0".
        A missing key always raises; other values raise unless
        ``normalize_invalid`` turns them into False.
        """
        value = RequestValidator._find_raw(req, key)
        if value is None:
            raise ValidationError(error_msg)

        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized in BOOL_TRUE:
                return True
            if normalized in BOOL_FALSE:
                return False

        if normalize_invalid:
            return False
        raise ValidationError(error_msg)

    @staticmethod
    def get_array(req, key: str, error_msg: str) -> list:
        value = RequestValidator._find_raw(req, key)
        if isinstance(value, dict):
            return list(value.values())
        if not isinstance(value, list):
            raise ValidationError(error_msg)
        return value

    @staticmethod
    def get_auth_user_id(req) -> str:
        auth = req.auth or {}
        user_id = auth.get("id")
        if not isinstance(user_id, str) or not user_id:
            raise UnauthorizedError("Unauthorized. You must be logged in.")
        return user_id

    @staticmethod
    def ensure_success(result, action: str, require_data: bool = True, ignore_changes: bool = False) -> None:
        if not result.success:
            detail = " | ".join(str(e) for e in result.error) if result.error else "Unknown database error."
            raise InternalError(f"Failed to {action}: {detail}")

        if not ignore_changes and not result.is_changed():
            raise NotFoundError(f"Failed to {action}: No data or changes found.")

        if require_data and result.data is None:
            raise NotFoundError(f"Failed to {action}: No data or changes found.")
