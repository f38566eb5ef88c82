"""Task endpoints dispatched through RouterApp as a signed-in user."""

import pytest

from models import Task
from query_result import QueryResult


@pytest.fixture()
def signed_in(router_app, make_request):
    res = router_app.dispatch(
        make_request("POST", "/v1/users/signup", body={"username": "alice", "email": "a@x.com", "password": "pw123"})
    )
    assert res.success
    return res.data["id"]


@pytest.fixture()
def call(router_app, make_request, signed_in):
    def _call(method, path, body=None, query=None):
        return router_app.dispatch(make_request(method, path, body=body, query=query))

    return _call


def _add(call, title="Buy milk", **extra):
    return call("POST", "/v1/tasks", {"title": title, **extra})


def test_add_task_strips_html_and_hides_owner(call):
    res = _add(call, "<b>Buy</b> milk", description="<script>x</script>2 litres")

    task = res.data["task"]
    assert res.message == "Task added successfully"
    assert task["title"] == "Buy milk"
    assert task["description"] == "x2 litres"
    assert task["is_done"] is False
    assert "user_id" not in task and "created_at" not in task


def test_description_keeps_entities_encoded(call):
    res = _add(call, "t", description="&lt;script&gt;alert(1)&lt;/script&gt;")

    description = res.data["task"]["description"]
    assert description == "&lt;script&gt;alert(1)&lt;/script&gt;"
    assert "<script>" not in description


def test_description_keeps_line_breaks(call):
    task_id = _add(call, "t", description="  line1\n\nline2  ").data["task"]["id"]
    assert Task.query.get(task_id).description == "line1\n\nline2"

    res = call("PUT", f"/v1/tasks/{task_id}", {"title": "t", "description": "a\n  b"})
    assert res.data["task"]["description"] == "a\n  b"


@pytest.mark.parametrize("title, message", [("", "Task title is required."), ("x" * 256, "Task title is too long.")])
def test_add_task_validation(call, title, message):
    res = _add(call, title)
    assert res.http_status == 400
    assert res.message == message


def test_get_tasks_paginates(call):
    for i in range(12):
        _add(call, f"task {i}")

    res = call("GET", "/v1/tasks", query={"page": "2", "per_page": "5"})
    assert res.message == "Task retrieved successfully"
    assert len(res.data["task"]) == 5
    assert res.total_pages == 3


def test_get_tasks_with_no_rows_has_one_page(call):
    res = call("GET", "/v1/tasks", query={"page": "0"})
    assert res.data == {"task": []}
    assert res.total_pages == 1


def test_get_tasks_search(call):
    _add(call, "groceries")
    _add(call, "laundry")

    res = call("GET", "/v1/tasks", query={"search": "grocer"})
    assert [t["title"] for t in res.data["task"]] == ["groceries"]
    assert res.total_pages == 1


def test_total_pages_is_one_when_count_fails(router_app, call, monkeypatch):
    for i in range(12):
        _add(call, f"task {i}")
    queries = router_app.task_controller.get_tasks_service.task_queries
    monkeypatch.setattr(
        queries, "count_tasks_by_user_id", lambda *args: QueryResult.fail(["OperationalError", "db down"])
    )

    res = call("GET", "/v1/tasks", query={"per_page": "5"})
    assert res.success
    assert len(res.data["task"]) == 5
    assert res.total_pages == 1


def test_update_task_keeps_status_when_absent(call):
    task_id = _add(call).data["task"]["id"]
    call("PATCH", f"/v1/tasks/{task_id}/done", {"is_done": True})

    res = call("PUT", f"/v1/tasks/{task_id}", {"title": "Buy oat milk"})
    assert res.data["task"]["title"] == "Buy oat milk"
    assert res.data["task"]["is_done"] is True

    res = call("PATCH", f"/v1/tasks/{task_id}", {"title": "Buy oat milk", "is_done": "maybe"})
    assert res.data["task"]["is_done"] is False


def test_mark_done_rejects_invalid_status(call):
    task_id = _add(call).data["task"]["id"]
    res = call("PATCH", f"/v1/tasks/{task_id}/done", {"is_done": "not_a_bool"})

    assert res.success is False
    assert res.type == "error"
    assert res.message == "Invalid status value."


def test_mark_done_toggles_without_value(call):
    task_id = _add(call).data["task"]["id"]

    assert call("POST", f"/v1/tasks/{task_id}/done").data["task"]["is_done"] is True
    assert call("POST", f"/v1/tasks/{task_id}/done").data["task"]["is_done"] is False


def test_missing_task_is_not_found(call):
    res = call("PATCH", "/v1/tasks/999", {"title": "nope"})
    assert res.http_status == 404
    assert res.message == "No task found."


def test_delete_task_twice(call):
    task_id = _add(call).data["task"]["id"]

    first = call("DELETE", f"/v1/tasks/{task_id}")
    second = call("DELETE", f"/v1/tasks/{task_id}")
    assert first.data == {"id": task_id}
    assert second.http_status == 404


def test_bulk_mark_done_and_delete(call):
    ids = [_add(call, f"t{i}").data["task"]["id"] for i in range(3)]

    done = call("PATCH", "/v1/tasks/bulk/done", {"ids": ids + ["abc"], "is_done": True})
    assert done.data == {"count": 3}
    assert Task.query.filter_by(is_done=True).count() == 3

    deleted = call("DELETE", "/v1/tasks/bulk", {"ids": [str(i) for i in ids]})
    assert deleted.data == {"count": 3}
    assert Task.query.count() == 0


@pytest.mark.parametrize(
    "body, status, expected",
    [
        ({"ids": "1,2"}, 400, "IDs must be an array."),
        ({"ids": ["x", "y"]}, 200, None),
        ({"ids": ["²", "١"]}, 200, None),
        ({"ids": list(range(1, 52))}, 400, "Cannot delete more than 50 tasks at once."),
    ],
)
def test_bulk_delete_input_rules(call, body, status, expected):
    res = call("DELETE", "/v1/tasks/bulk", body)
    assert res.http_status == status
    if expected:
        assert res.message == expected
    else:
        assert res.data == {"count": 0}


def test_tasks_are_isolated_between_users(router_app, make_request, call, cookie_manager):
    task_id = _add(call, "alice's secret").data["task"]["id"]

    router_app.dispatch(
        make_request("POST", "/v1/users/signup", body={"username": "bob", "email": "b@x.com", "password": "pw"})
    )
    # cookies now belong to bob
    assert call("PATCH", f"/v1/tasks/{task_id}", {"title": "mine now"}).message == "No task found."
    assert call("POST", f"/v1/tasks/{task_id}/done").http_status == 404
    assert call("DELETE", f"/v1/tasks/{task_id}").http_status == 404
    assert call("GET", "/v1/tasks").data == {"task": []}
    assert call("DELETE", "/v1/tasks/bulk", {"ids": [task_id]}).data == {"count": 0}
    assert Task.query.get(task_id).title == "alice's secret"
