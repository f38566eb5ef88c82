import pytest

from extensions import db
from models import User
from modules.tasks.queries import TaskQueries


@pytest.fixture()
def queries(app):
    for uid, name in (("u-a", "alice"), ("u-b", "bob")):
        db.session.add(User(id=uid, username=name, email=f"{name}@x.com", password="hash"))
    db.session.commit()
    return TaskQueries()


def test_add_and_get_are_scoped_by_user(queries):
    added = queries.add_task("Buy milk", "", "u-a")
    assert added.success and added.affected == 1

    task_id = added.data["id"]
    assert queries.get_task_by_id(task_id, "u-a").data["title"] == "Buy milk"
    other = queries.get_task_by_id(task_id, "u-b")
    assert other.success and other.data is None and not other.is_changed()


def test_open_tasks_are_listed_first(queries):
    first = queries.add_task("first", "", "u-a").data["id"]
    queries.add_task("second", "", "u-a")
    queries.mark_done(first, True, "u-a")

    titles = [t["title"] for t in queries.get_tasks_by_user_id("u-a").data]
    assert titles == ["second", "first"]


def test_paging_search_and_count(queries):
    for i in range(12):
        queries.add_task(f"task {i}", "", "u-a")
    queries.add_task("groceries", "", "u-a")

    assert len(queries.get_tasks_by_page(1, 5, "u-a").data) == 5
    assert len(queries.get_tasks_by_page(3, 5, "u-a").data) == 3
    assert len(queries.get_tasks_by_page(0, 5, "u-a").data) == 5
    assert queries.count_tasks_by_user_id("u-a").data == 13
    assert queries.count_tasks_by_user_id("u-a", "grocer").data == 1
    assert queries.count_tasks_by_user_id("u-b").data == 0


def test_update_and_mark_done_ignore_foreign_rows(queries):
    task_id = queries.add_task("mine", "", "u-a").data["id"]

    assert queries.update_task(task_id, "hijack", "", True, "u-b").affected == 0
    assert queries.mark_done(task_id, True, "u-b").affected == 0

    updated = queries.update_task(task_id, "renamed", "desc", True, "u-a")
    assert updated.data["title"] == "renamed"
    assert updated.data["is_done"] is True


def test_delete_is_idempotent(queries):
    task_id = queries.add_task("temp", "", "u-a").data["id"]
    assert queries.delete_task(task_id, "u-a").affected == 1
    again = queries.delete_task(task_id, "u-a")
    assert again.success and again.affected == 0


def test_bulk_operations_only_touch_owned_rows(queries):
    mine = [queries.add_task(f"a{i}", "", "u-a").data["id"] for i in range(3)]
    theirs = queries.add_task("b", "", "u-b").data["id"]

    assert queries.mark_tasks_done(mine + [theirs], True, "u-a").affected == 3
    assert queries.get_task_by_id(theirs, "u-b").data["is_done"] is False

    assert queries.delete_tasks(mine + [theirs], "u-a").affected == 3
    assert queries.get_task_by_id(theirs, "u-b").data is not None
    assert queries.delete_tasks([], "u-a").affected == 0
