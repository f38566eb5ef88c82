"""Uniform result object returned by every data-access call."""

from dataclasses import dataclass
from typing import Any, List, Optional

from sqlalchemy.exc import IntegrityError


@dataclass(frozen=True)
class QueryResult:
    success: bool
    affected: int = 0
    data: Any = None
    error: Optional[List[str]] = None
    conflict: bool = False  # a unique constraint rejected the write

    @classmethod
    def ok(cls, data: Any = None, affected: int = 0) -> "QueryResult":
        return cls(True, affected, data, None)

    @classmethod
    def fail(cls, error: Optional[List[str]] = None, conflict: bool = False) -> "QueryResult":
        return cls(False, 0, None, error, conflict)

    @classmethod
    def from_exception(cls, exc: Exception) -> "QueryResult":
        detail = getattr(exc, "orig", None) or exc
        return cls.fail([type(exc).__name__, str(detail)], conflict=isinstance(exc, IntegrityError))

    def is_changed(self) -> bool:
        return self.affected > 0

    def has_data(self) -> bool:
        return bool(self.data)
