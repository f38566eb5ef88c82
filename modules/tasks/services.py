"""Task use cases. The caller's user id always comes from ``req.auth``."""

import logging
import math

from modules.api.errors import NotFoundError, ValidationError
from utils import clean_text, is_digits
from validators import RequestValidator

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 255
MAX_BULK_IDS = 50
MAX_PER_PAGE = 100
HIDDEN_FIELDS = ("user_id", "created_at")


def public_task(task: dict) -> dict:
    return {k: v for k, v in task.items() if k not in HIDDEN_FIELDS}


def _title(req) -> str:
    title = RequestValidator.get_string(req, "title", "Task title is required.")
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError("Task title is too long.")
    return title


def _description(req, default: str = "") -> str:
    value = req.get_body_value("description")
    if isinstance(value, str):
        return clean_text(value)
    return default


def _task_id(req) -> int:
    return RequestValidator.get_int(req, "id", "Task ID must be a numeric string.")


def _clean_ids(req) -> list:
    """Numeric ids from the ``ids`` array; everything else is dropped."""
    ids = RequestValidator.get_array(req, "ids", "IDs must be an array.")
    clean = []
    for value in ids:
        if isinstance(value, bool):
            continue
        if isinstance(value, int):
            clean.append(value)
        elif isinstance(value, str) and is_digits(value.strip()):
            clean.append(int(value.strip()))
        elif isinstance(value, float) and value.is_integer():
            clean.append(int(value))
    return clean


class TaskPaginator:
    def __init__(self, task_queries):
        self.task_queries = task_queries

    def calculate_total_pages(self, user_id: str, per_page: int, search: str | None = None) -> int:
        result = self.task_queries.count_tasks_by_user_id(user_id, search)
        if not result.success:
            return 1
        return max(1, math.ceil(int(result.data or 0) / per_page))


class AddTaskService:
    def __init__(self, task_queries):
        self.task_queries = task_queries

    def execute(self, req) -> dict:
        title = _title(req)
        description = _description(req)
        user_id = RequestValidator.get_auth_user_id(req)

        result = self.task_queries.add_task(title, description, user_id)
        RequestValidator.ensure_success(result, "add task")
        return {"task": public_task(result.data)}


class GetTasksService:
    def __init__(self, task_queries, default_per_page: int = 10):
        self.task_queries = task_queries
        self.paginator = TaskPaginator(task_queries)
        self.default_per_page = default_per_page

    def execute(self, req) -> dict:
        user_id = RequestValidator.get_auth_user_id(req)
        page = max(1, req.get_int_query("page", 1))
        per_page = min(MAX_PER_PAGE, max(1, req.get_int_query("per_page", self.default_per_page)))
        search = clean_text(req.get_string_query("search", "")) or None

        result = self.task_queries.get_tasks_by_page(page, per_page, user_id, search)
        RequestValidator.ensure_success(result, "retrieve tasks", require_data=False, ignore_changes=True)

        return {
            "task": [public_task(t) for t in result.data or []],
            "totalPages": self.paginator.calculate_total_pages(user_id, per_page, search),
        }


class UpdateTaskService:
    def __init__(self, task_queries):
        self.task_queries = task_queries

    def execute(self, req) -> dict:
        task_id = _task_id(req)
        title = _title(req)
        user_id = RequestValidator.get_auth_user_id(req)

        current = self.task_queries.get_task_by_id(task_id, user_id)
        if not current.success or not current.has_data():
            raise NotFoundError("No task found.")

        description = _description(req, current.data.get("description") or "")
        if req.get_body_value("is_done") is None:
            is_done = current.data["is_done"]
        else:
            is_done = RequestValidator.get_bool(req, "is_done", "Invalid status value.", normalize_invalid=True)

        result = self.task_queries.update_task(task_id, title, description, is_done, user_id)
        RequestValidator.ensure_success(result, "update task")
        return {"task": public_task(result.data)}


class MarkDoneTaskService:
    """Sets ``is_done`` when given, otherwise flips the current status."""

    def __init__(self, task_queries):
        self.task_queries = task_queries

    def execute(self, req) -> dict:
        task_id = _task_id(req)
        user_id = RequestValidator.get_auth_user_id(req)
        requested = None
        if req.get_body_value("is_done") is not None:
            requested = RequestValidator.get_bool(req, "is_done", "Invalid status value.")

        current = self.task_queries.get_task_by_id(task_id, user_id)
        if not current.success or not current.has_data():
            raise NotFoundError("No task found.")

        is_done = (not current.data["is_done"]) if requested is None else requested
        result = self.task_queries.mark_done(task_id, is_done, user_id)
        RequestValidator.ensure_success(result, "mark task as done")
        return {"task": public_task(result.data)}


class DeleteTaskService:
    def __init__(self, task_queries):
        self.task_queries = task_queries

    def execute(self, req) -> dict:
        task_id = _task_id(req)
        user_id = RequestValidator.get_auth_user_id(req)

        result = self.task_queries.delete_task(task_id, user_id)
        if result.success and not result.is_changed():
            raise NotFoundError("No task found.")
        RequestValidator.ensure_success(result, "delete task")
        return {"id": task_id}


class BulkDeleteTaskService:
    def __init__(self, task_queries):
        self.task_queries = task_queries

    def execute(self, req) -> dict:
        ids = _clean_ids(req)
        user_id = RequestValidator.get_auth_user_id(req)
        if not ids:
            return {"count": 0}
        if len(ids) > MAX_BULK_IDS:
            raise ValidationError(f"Cannot delete more than {MAX_BULK_IDS} tasks at once.")

        result = self.task_queries.delete_tasks(ids, user_id)
        RequestValidator.ensure_success(result, "bulk delete tasks", require_data=False, ignore_changes=True)
        logger.info("User %s bulk-deleted %d task(s)", user_id, result.affected)
        return {"count": result.affected}


class BulkMarkDoneTaskService:
    def __init__(self, task_queries):
        self.task_queries = task_queries

    def execute(self, req) -> dict:
        ids = _clean_ids(req)
        is_done = RequestValidator.get_bool(req, "is_done", "Invalid status value.")
        user_id = RequestValidator.get_auth_user_id(req)
        if not ids:
            return {"count": 0}
        if len(ids) > MAX_BULK_IDS:
            raise ValidationError(f"Cannot update more than {MAX_BULK_IDS} tasks at once.")

        result = self.task_queries.mark_tasks_done(ids, is_done, user_id)
        RequestValidator.ensure_success(result, "bulk mark tasks", require_data=False, ignore_changes=True)
        return {"count": result.affected}
