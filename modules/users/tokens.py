"""Refresh-token storage and rotation rules."""

import logging
import time

from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import RefreshToken
from modules.api.errors import InternalError, InvalidTokenError
from query_result import QueryResult

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_TTL = 604800  # 7 days


class RefreshTokenQueries:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def _failed(self, action: str, exc: SQLAlchemyError) -> QueryResult:
        self.session.rollback()
        logger.warning("Refresh token query failed (%s): %s", action, exc)
        return QueryResult.from_exception(exc)

    def create(self, user_id: str, token_hash: str, expires_at: int) -> QueryResult:
        try:
            row = RefreshToken(user_id=user_id, token_hash=token_hash, expires_at=int(expires_at))
            self.session.add(row)
            self.session.commit()
            return QueryResult.ok({"id": row.id}, 1)
        except SQLAlchemyError as exc:
            return self._failed("create", exc)

    def get_by_hash(self, token_hash: str) -> QueryResult:
        try:
            row = self.session.query(RefreshToken).filter_by(token_hash=token_hash).first()
            if row is None:
                return QueryResult.ok(None, 0)
            data = {"id": row.id, "user_id": row.user_id, "expires_at": row.expires_at}
            return QueryResult.ok(data, 1)
        except SQLAlchemyError as exc:
            return self._failed("get by hash", exc)

    def delete_by_hash(self, token_hash: str) -> QueryResult:
        try:
            affected = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.token_hash == token_hash)
                .delete(synchronize_session=False)
            )
            self.session.commit()
            return QueryResult.ok(None, affected)
        except SQLAlchemyError as exc:
            return self._failed("delete by hash", exc)

    def delete_all_for_user(self, user_id: str) -> QueryResult:
        try:
            affected = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id)
                .delete(synchronize_session=False)
            )
            self.session.commit()
            return QueryResult.ok(None, affected)
        except SQLAlchemyError as exc:
            return self._failed("delete all for user", exc)

    def get_token_ids_by_user_id(self, user_id: str) -> QueryResult:
        """Ids of the user's tokens, newest first."""
        try:
            rows = (
                self.session.query(RefreshToken.id)
                .filter(RefreshToken.user_id == user_id)
                .order_by(RefreshToken.created_at.desc(), RefreshToken.id.desc())
                .all()
            )
            ids = [row.id for row in rows]
            return QueryResult.ok(ids, len(ids))
        except SQLAlchemyError as exc:
            return self._failed("list ids", exc)

    def delete_tokens(self, ids: list) -> QueryResult:
        if not ids:
            return QueryResult.ok(None, 0)
        try:
            affected = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.id.in_(ids))
                .delete(synchronize_session=False)
            )
            self.session.commit()
            return QueryResult.ok(None, affected)
        except SQLAlchemyError as exc:
            return self._failed("delete ids", exc)

    def cleanup_expired(self, user_id: str, now: int) -> QueryResult:
        try:
            affected = (
                self.session.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id, RefreshToken.expires_at < int(now))
                .delete(synchronize_session=False)
            )
            self.session.commit()
            return QueryResult.ok(None, affected)
        except SQLAlchemyError as exc:
            return self._failed("cleanup expired", exc)


class RefreshTokenService:
    """
    Issues opaque refresh tokens and stores only their SHA-256 hash.

    Creating a token first drops the user's expired rows, then trims the
    remaining ones so that at most ``max_sessions`` stay alive once the new
    token is stored. ``clock`` returns epoch seconds.
    """

    def __init__(self, queries: RefreshTokenQueries, jwt, max_sessions: int = 2, clock=time.time):
        self.queries = queries
        self.jwt = jwt
        self.max_sessions = max_sessions
        self.clock = clock

    def _now(self) -> int:
        return int(self.clock())

    def create(self, user_id: str, ttl: int = DEFAULT_REFRESH_TTL) -> str:
        now = self._now()
        self.queries.cleanup_expired(user_id, now)
        self._enforce_session_limit(user_id)

        token = self.jwt.create_refresh_token()
        result = self.queries.create(user_id, self.jwt.hash_refresh_token(token), now + ttl)
        if not result.success:
            raise InternalError(f"Failed to store refresh token: {' | '.join(result.error or [])}")
        return token

    def _enforce_session_limit(self, user_id: str) -> None:
        keep = max(self.max_sessions - 1, 0)
        result = self.queries.get_token_ids_by_user_id(user_id)
        ids = result.data or []
        if len(ids) > keep:
            self.queries.delete_tokens(ids[keep:])

    def verify(self, token: str) -> str:
        result = self.queries.get_by_hash(self.jwt.hash_refresh_token(token))
        if not result.success:
            raise InternalError(f"Failed to look up refresh token: {' | '.join(result.error or [])}")
        row = result.data
        if row is None:
            raise InvalidTokenError("Invalid refresh token.")
        if row["expires_at"] < self._now():
            self.revoke(token)
            raise InvalidTokenError("Refresh token expired.")
        return str(row["user_id"])

    def revoke(self, token: str) -> None:
        self.queries.delete_by_hash(self.jwt.hash_refresh_token(token))

    def revoke_all_for_user(self, user_id: str) -> None:
        self.queries.delete_all_for_user(user_id)
