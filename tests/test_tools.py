# File: /tests/test_tools.py | Version: 1.1 | Path: /tests/test_tools.py
from app.routers.tools import TOOLS

EXPECTED = {
    "list_databases",
    "create_database",
    "delete_database",
    "get_database_schema",
    "add_column",
    "update_column",
    "delete_column",
    "get_database_rows",
    "add_database_row",
    "update_database_row",
    "delete_database_rows",
    "import_csv",
    "list_trash",
    "restore_from_trash",
    "permanent_delete_from_trash",
    "empty_trash",
    "list_snapshots",
    "restore_snapshot",
}


def _call(client, headers, tool, **args):
    return client.post(f"/tools/{tool}", json=args, headers=headers)


def test_catalogue_lists_every_operation(client, auth_headers):
    r = client.get("/tools", headers=auth_headers)
    assert r.status_code == 200
    tools = r.json()
    assert {t["name"] for t in tools} == EXPECTED == set(TOOLS)
    add_row = next(t for t in tools if t["name"] == "add_database_row")
    assert "database_id" in add_row["parameters"]["properties"]
    assert add_row["description"]


def test_dispatch_round_trip(client, auth_headers):
    r = _call(client, auth_headers, "create_database", name="Via tools", kind="task")
    assert r.status_code == 200, r.text
    assert r.json()["tool"] == "create_database"
    database_id = r.json()["result"]["database_id"]

    r = _call(client, auth_headers, "add_database_row", database_id=database_id, cells={"Title": "hello"})
    assert r.status_code == 200, r.text
    row_id = r.json()["result"]["_id"]

    r = _call(client, auth_headers, "get_database_rows", database_id=database_id)
    page = r.json()["result"]
    assert page["total_count"] == 1
    assert page["rows"][0]["_id"] == row_id

    r = _call(client, auth_headers, "delete_database_rows", database_id=database_id, row_ids=[row_id])
    assert r.json()["result"]["deleted_count"] == 1
    trash = _call(client, auth_headers, "list_trash").json()["result"]
    assert [t["item_id"] for t in trash] == [row_id]


def test_delete_database_tool_requires_confirm(client, auth_headers):
    database_id = _call(client, auth_headers, "create_database", name="Keep").json()["result"]["database_id"]
    r = _call(client, auth_headers, "delete_database", database_id=database_id)
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "CONFIRMATION_REQUIRED"


def test_unknown_tool(client, auth_headers):
    r = _call(client, auth_headers, "drop_everything")
    assert r.status_code == 404
    assert r.json()["error"]["code"] == "NOT_FOUND"


def test_bad_arguments(client, auth_headers):
    r = _call(client, auth_headers, "add_database_row", cells={"Title": "no database"})
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"
    assert "database_id" in r.json()["error"]["message"]

    r = _call(client, auth_headers, "list_trash", bogus=1)
    assert r.status_code == 400


def test_tools_require_auth(client):
    assert client.post("/tools/list_databases", json={}).status_code == 401
