# File: /tests/test_databases_api.py | Version: 1.0 | Path: /tests/test_databases_api.py
from typing import Any, Dict

from fastapi.testclient import TestClient


def _create(client: TestClient, headers, **payload) -> Dict[str, Any]:
    r = client.post("/databases", json=payload, headers=headers)
    assert r.status_code == 201, r.text
    return r.json()


def _col(schema: Dict[str, Any], name: str) -> Dict[str, Any]:
    return next(c for c in schema["columns"] if c["name"] == name)


def test_task_database_bootstrap(client, auth_headers):
    schema = _create(client, auth_headers, name="Sprint 1", kind="task")

    assert schema["kind"] == "task"
    assert schema["database_id"].startswith("db-")
    assert len(schema["columns"]) == 15
    assert [c["order"] for c in schema["columns"]] == list(range(15))

    status = _col(schema, "Status")
    assert [c["id"] for c in status["options"]["choices"]] == [
        "backlog",
        "pending",
        "in_progress",
        "completed",
        "cancelled",
        "blocked",
        "awaiting_info",
    ]
    assert _col(schema, "Tags")["type"] == "multi-select"
    assert _col(schema, "Title")["required"] is True
    assert _col(schema, "Epic ID")["visible"] is False

    views = {v["type"]: v for v in schema["views"]}
    assert set(views) == {"table", "kanban", "calendar"}
    assert views["kanban"]["config"]["group_by"] == status["id"]
    assert views["calendar"]["config"]["date_column_id"] == _col(schema, "Due Date")["id"]
    assert schema["pinned_columns"] == [status["id"]]
    assert schema["default_view"] == "table"


def test_event_database_bootstrap(client, auth_headers):
    schema = _create(client, auth_headers, name="Calendar", kind="event")
    assert len(schema["columns"]) == 11
    assert [v["type"] for v in schema["views"]] == ["calendar", "table"]
    assert schema["views"][0]["config"]["date_column_id"] == _col(schema, "Start Date")["id"]
    assert schema["default_view"] == "calendar"
    assert schema["pinned_columns"] == []


def test_generic_database_with_columns(client, auth_headers):
    schema = _create(
        client,
        auth_headers,
        name="Bugs",
        columns=[
            {"name": "Title", "type": "text"},
            {"name": "Areas", "type": "multi_select", "options": [{"label": "UI"}, {"label": "Data Layer"}]},
        ],
    )
    assert schema["kind"] == "generic"
    assert [c["name"] for c in schema["columns"]] == ["Title", "Areas"]
    areas = _col(schema, "Areas")
    assert areas["type"] == "multi-select"
    assert [c["id"] for c in areas["options"]["choices"]] == ["ui", "data_layer"]
    assert [v["type"] for v in schema["views"]] == ["table"]


def test_generic_database_rejects_duplicate_column_names(client, auth_headers):
    r = client.post(
        "/databases",
        json={"name": "Dup", "columns": [{"name": "A", "type": "text"}, {"name": "A", "type": "number"}]},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"
    assert client.get("/databases", headers=auth_headers).json() == []


def test_choice_id_derivation_on_add_column(client, auth_headers):
    db = _create(client, auth_headers, name="Issues")
    r = client.post(
        f"/databases/{db['database_id']}/columns",
        json={"name": "Severity", "type": "select", "options": [{"label": "Low"}, {"label": "High"}]},
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    col = r.json()
    assert [c["id"] for c in col["options"]["choices"]] == ["low", "high"]
    assert all(c["color"] == "bg-gray-200" for c in col["options"]["choices"])


def test_add_column_with_existing_name_leaves_schema_unchanged(client, auth_headers):
    db = _create(client, auth_headers, name="Sprint", kind="task")
    before = client.get(f"/databases/{db['database_id']}", headers=auth_headers).json()

    r = client.post(
        f"/databases/{db['database_id']}/columns",
        json={"name": "Status", "type": "text"},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"

    after = client.get(f"/databases/{db['database_id']}", headers=auth_headers).json()
    assert after["columns"] == before["columns"]


def test_add_column_appends_with_next_order(client, auth_headers):
    db = _create(client, auth_headers, name="Sprint", kind="task")
    r = client.post(
        f"/databases/{db['database_id']}/columns",
        json={"name": "Story Points", "type": "number", "options": {"format": "integer"}},
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    assert r.json()["order"] == 15
    assert r.json()["options"] == {"format": "integer"}


def test_choice_options_on_non_select_column_are_rejected(client, auth_headers):
    db = _create(client, auth_headers, name="Notes")
    r = client.post(
        f"/databases/{db['database_id']}/columns",
        json={"name": "Body", "type": "text", "options": [{"label": "x"}]},
        headers=auth_headers,
    )
    assert r.status_code == 400


def test_update_column_rename_hide_and_replace_choices(client, auth_headers):
    db = _create(client, auth_headers, name="Sprint", kind="task")
    status = _col(db, "Status")
    url = f"/databases/{db['database_id']}/columns/{status['id']}"

    r = client.patch(
        url,
        json={"name": "State", "visible": False, "width": 240, "options": [{"label": "Open"}, {"label": "Done"}]},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    col = r.json()
    assert col["id"] == status["id"]
    assert col["type"] == "select"
    assert col["name"] == "State"
    assert col["visible"] is False
    assert col["width"] == 240
    assert [c["id"] for c in col["options"]["choices"]] == ["open", "done"]

    # renaming onto another column's name fails
    r = client.patch(url, json={"name": "Priority"}, headers=auth_headers)
    assert r.status_code == 400


def test_update_unknown_column_is_not_found(client, auth_headers):
    db = _create(client, auth_headers, name="Plain")
    r = client.patch(
        f"/databases/{db['database_id']}/columns/does-not-exist",
        json={"name": "X"},
        headers=auth_headers,
    )
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_delete_column_cleans_pins_and_views(client, auth_headers):
    db = _create(client, auth_headers, name="Sprint", kind="task")
    status = _col(db, "Status")

    r = client.delete(f"/databases/{db['database_id']}/columns/{status['id']}", headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["column"]["name"] == "Status"

    schema = client.get(f"/databases/{db['database_id']}", headers=auth_headers).json()
    assert len(schema["columns"]) == 14
    assert schema["pinned_columns"] == []
    kanban = next(v for v in schema["views"] if v["type"] == "kanban")
    assert "group_by" not in kanban["config"]


def test_list_databases_filters_by_kind_and_document(client, auth_headers):
    doc = client.post("/documents", json={"title": "Planning"}, headers=auth_headers).json()
    _create(client, auth_headers, name="Tasks", kind="task", document_id=doc["id"])
    _create(client, auth_headers, name="Events", kind="event")

    all_dbs = client.get("/databases", headers=auth_headers).json()
    assert {d["name"] for d in all_dbs} == {"Tasks", "Events"}
    assert all_dbs[0]["name"] == "Events"  # newest first

    tasks = client.get("/databases", params={"kind": "task"}, headers=auth_headers).json()
    assert [d["name"] for d in tasks] == ["Tasks"]
    assert tasks[0]["column_count"] == 15

    in_doc = client.get("/databases", params={"document_id": doc["id"]}, headers=auth_headers).json()
    assert [d["document_id"] for d in in_doc] == [doc["id"]]


def test_create_in_unknown_document_is_not_found(client, auth_headers):
    r = client.post(
        "/databases", json={"name": "X", "document_id": "missing-doc"}, headers=auth_headers
    )
    assert r.status_code == 404


def test_delete_database_requires_confirm(client, auth_headers):
    db = _create(client, auth_headers, name="Temp")
    url = f"/databases/{db['database_id']}"

    r = client.delete(url, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "CONFIRMATION_REQUIRED"
    assert client.get(url, headers=auth_headers).status_code == 200

    r = client.delete(url, params={"confirm": True}, headers=auth_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["database_id"] == db["database_id"]
    assert body["snapshot_token"].startswith("snap_")

    assert client.get(url, headers=auth_headers).status_code == 404
    assert client.get("/databases", headers=auth_headers).json() == []
