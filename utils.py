import re
from datetime import datetime, timezone

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

# tags and comments only; entities such as &lt; are left as typed
_TAG_RE = re.compile(r"<!--.*?-->|<[^>]*>", re.DOTALL)
_DIGITS_RE = re.compile(r"[0-9]+")


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp(value):
    if value is None:
        return None
    return value.strftime(TIMESTAMP_FORMAT)


def clean_text(value: str) -> str:
    """Strip HTML tags and surrounding whitespace from user input."""
    return _TAG_RE.sub("", value).strip()


def is_digits(text: str) -> bool:
    """ASCII digits only; ``str.isdigit`` also accepts characters like '²' that int() rejects."""
    return _DIGITS_RE.fullmatch(text) is not None


def is_scalar(value) -> bool:
    return isinstance(value, (str, int, float, bool))
