from modules.api.errors import InternalError, NotFoundError
from modules.api.responder import JsonResponder


def test_success_defaults():
    body = JsonResponder.success("OK message").to_dict()
    assert body == {"success": True, "type": "success", "message": "OK message", "data": {}}


def test_error_and_info_types():
    err = JsonResponder.error("Error occurred")
    info = JsonResponder.info("Just info")
    assert err.type == "error" and err.http_status == 400
    assert info.type == "info" and info.success is False


def test_unknown_type_becomes_info():
    assert JsonResponder.success("Weird type", "weird").type == "info"


def test_fluent_setters_and_total_pages():
    res = (
        JsonResponder.error("Force type")
        .with_type("success")
        .with_http_status(201)
        .with_payload({"task": []})
        .with_total_pages(3)
    )
    body = res.to_dict()
    assert body["type"] == "success"
    assert body["data"] == {"task": []}
    assert body["totalPages"] == 3
    assert res.http_status == 201


def test_from_error_hides_internal_detail():
    internal = JsonResponder.from_error(InternalError("Failed to add task: no such table"))
    missing = JsonResponder.from_error(NotFoundError("No task found."))
    assert (internal.message, internal.http_status) == ("Internal server error", 500)
    assert (missing.message, missing.http_status) == ("No task found.", 404)


def test_to_response_sets_status(app):
    with app.test_request_context():
        response = JsonResponder.success("Created").with_http_status(201).to_response()
    assert response.status_code == 201
    assert response.get_json()["message"] == "Created"
