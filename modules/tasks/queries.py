"""
Data access for tasks.

Every statement is scoped by ``user_id``: a task id that belongs to somebody
else behaves exactly like one that does not exist.
"""

import logging

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from extensions import db
from models import Task
from query_result import QueryResult
from utils import utcnow

logger = logging.getLogger(__name__)


class TaskQueries:
    def __init__(self, session=None):
        self.session = session if session is not None else db.session

    def _failed(self, action: str, exc: SQLAlchemyError) -> QueryResult:
        self.session.rollback()
        logger.warning("Task query failed (%s): %s", action, exc)
        return QueryResult.from_exception(exc)

    def _owned(self, user_id: str):
        return self.session.query(Task).filter(Task.user_id == user_id)

    @staticmethod
    def _ordered(query):
        # open tasks first, most recently touched on top
        return query.order_by(Task.is_done.asc(), Task.updated_at.desc(), Task.id.desc())

    @staticmethod
    def _search(query, search: str | None):
        if search:
            query = query.filter(Task.title.like(f"%{search}%"))
        return query

    def add_task(self, title: str, description: str, user_id: str) -> QueryResult:
        try:
            task = Task(title=title, description=description, user_id=user_id)
            self.session.add(task)
            self.session.commit()
            return QueryResult.ok(task.to_dict(), 1)
        except SQLAlchemyError as exc:
            return self._failed("add", exc)

    def get_task_by_id(self, task_id: int, user_id: str) -> QueryResult:
        try:
            task = self._owned(user_id).filter(Task.id == task_id).first()
            return QueryResult.ok(task.to_dict() if task else None, 1 if task else 0)
        except SQLAlchemyError as exc:
            return self._failed("get by id", exc)

    def get_tasks_by_user_id(self, user_id: str) -> QueryResult:
        try:
            tasks = [t.to_dict() for t in self._ordered(self._owned(user_id)).all()]
            return QueryResult.ok(tasks, len(tasks))
        except SQLAlchemyError as exc:
            return self._failed("list", exc)

    def get_tasks_by_page(self, page: int, per_page: int, user_id: str, search: str | None = None) -> QueryResult:
        page = max(1, page)
        try:
            query = self._ordered(self._search(self._owned(user_id), search))
            rows = query.limit(per_page).offset((page - 1) * per_page).all()
            tasks = [t.to_dict() for t in rows]
            return QueryResult.ok(tasks, len(tasks))
        except SQLAlchemyError as exc:
            return self._failed("page", exc)

    def count_tasks_by_user_id(self, user_id: str, search: str | None = None) -> QueryResult:
        try:
            query = self.session.query(func.count(Task.id)).filter(Task.user_id == user_id)
            total = self._search(query, search).scalar() or 0
            return QueryResult.ok(total, 1)
        except SQLAlchemyError as exc:
            return self._failed("count", exc)

    def update_task(self, task_id: int, title: str, description: str, is_done: bool, user_id: str) -> QueryResult:
        try:
            task = self._owned(user_id).filter(Task.id == task_id).first()
            if task is None:
                return QueryResult.ok(None, 0)
            task.title = title
            task.description = description
            task.is_done = is_done
            task.updated_at = utcnow()
            self.session.commit()
            return QueryResult.ok(task.to_dict(), 1)
        except SQLAlchemyError as exc:
            return self._failed("update", exc)

    def mark_done(self, task_id: int, is_done: bool, user_id: str) -> QueryResult:
        try:
            task = self._owned(user_id).filter(Task.id == task_id).first()
            if task is None:
                return QueryResult.ok(None, 0)
            task.is_done = is_done
            task.updated_at = utcnow()
            self.session.commit()
            return QueryResult.ok(task.to_dict(), 1)
        except SQLAlchemyError as exc:
            return self._failed("mark done", exc)

    def delete_task(self, task_id: int, user_id: str) -> QueryResult:
        try:
            affected = self._owned(user_id).filter(Task.id == task_id).delete(synchronize_session=False)
            self.session.commit()
            return QueryResult.ok({"id": task_id} if affected else None, affected)
        except SQLAlchemyError as exc:
            return self._failed("delete", exc)

    def delete_tasks(self, ids: list, user_id: str) -> QueryResult:
        if not ids:
            return QueryResult.ok(None, 0)
        try:
            affected = self._owned(user_id).filter(Task.id.in_(ids)).delete(synchronize_session=False)
            self.session.commit()
            return QueryResult.ok(None, affected)
        except SQLAlchemyError as exc:
            return self._failed("bulk delete", exc)

    def mark_tasks_done(self, ids: list, is_done: bool, user_id: str) -> QueryResult:
        if not ids:
            return QueryResult.ok(None, 0)
        try:
            affected = (
                self._owned(user_id)
                .filter(Task.id.in_(ids))
                .update({Task.is_done: is_done, Task.updated_at: utcnow()}, synchronize_session=False)
            )
            self.session.commit()
            return QueryResult.ok(None, affected)
        except SQLAlchemyError as exc:
            return self._failed("bulk mark done", exc)
