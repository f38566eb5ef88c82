"""Data access for the users table. Every call returns a ``QueryResult``."""

import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import User
from query_result import QueryResult

logger = logging.getLogger(__name__)


class UserQueries:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def _failed(self, action: str, exc: SQLAlchemyError) -> QueryResult:
        self.session.rollback()
        logger.warning("User query failed (%s): %s", action, exc)
        return QueryResult.from_exception(exc)

    def create_user(self, user_id: str, username: str, email: str, password_hash: str) -> QueryResult:
        try:
            user = User(id=user_id, username=username, email=email, password=password_hash)
            self.session.add(user)
            self.session.commit()
            return QueryResult.ok(user.to_dict(), 1)
        except SQLAlchemyError as exc:
            return self._failed("create", exc)

    def get_user_by_name(self, username: str) -> QueryResult:
        try:
            user = self.session.query(User).filter_by(username=username).first()
            return QueryResult.ok(user.to_dict() if user else None, 1 if user else 0)
        except SQLAlchemyError as exc:
            return self._failed("get by name", exc)

    def get_user_by_id(self, user_id: str) -> QueryResult:
        try:
            user = self.session.get(User, user_id)
            return QueryResult.ok(user.to_dict() if user else None, 1 if user else 0)
        except SQLAlchemyError as exc:
            return self._failed("get by id", exc)

    def check_user_exists(self, username: str, email: str, exclude_id: str | None = None) -> QueryResult:
        """``data`` is True when another account already uses the username or email."""
        try:
            query = self.session.query(User.id).filter(or_(User.username == username, User.email == email))
            if exclude_id is not None:
                query = query.filter(User.id != exclude_id)
            exists = query.first() is not None
            return QueryResult.ok(exists, 1 if exists else 0)
        except SQLAlchemyError as exc:
            return self._failed("check exists", exc)

    def update_user(self, user_id: str, username: str, email: str) -> QueryResult:
        try:
            user = self.session.get(User, user_id)
            if user is None:
                return QueryResult.ok(None, 0)
            user.username = username
            user.email = email
            self.session.commit()
            return QueryResult.ok(user.to_dict(), 1)
        except SQLAlchemyError as exc:
            return self._failed("update", exc)

    def delete_user(self, user_id: str) -> QueryResult:
        try:
            affected = self.session.query(User).filter(User.id == user_id).delete(synchronize_session=False)
            self.session.commit()
            return QueryResult.ok(None, affected)
        except SQLAlchemyError as exc:
            return self._failed("delete", exc)
