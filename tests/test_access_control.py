# File: /tests/test_access_control.py | Version: 1.0 | Path: /tests/test_access_control.py
import pytest

from app.core.errors import AccessDenied
from app.core.permissions import authorize, require_database_access
from app.crud import databases as crud_db
from app.models import Document


@pytest.fixture()
def owner_doc(client, auth_headers):
    r = client.post("/documents", json={"title": "Planning"}, headers=auth_headers)
    assert r.status_code == 201, r.text
    return r.json()


@pytest.fixture()
def embedded_db(client, auth_headers, owner_doc):
    r = client.post(
        "/databases",
        json={"name": "Private", "kind": "task", "document_id": owner_doc["id"]},
        headers=auth_headers,
    )
    assert r.status_code == 201, r.text
    return r.json()


def test_non_owner_is_denied_and_nothing_is_written(client, auth_headers, make_headers, embedded_db):
    intruder = make_headers("intruder@example.com")
    base = f"/databases/{embedded_db['database_id']}"

    for method, url, kwargs in [
        ("get", f"{base}/rows", {}),
        ("get", base, {}),
        ("post", f"{base}/rows", {"json": {"cells": {"Title": "sneaky"}}}),
        ("post", f"{base}/columns", {"json": {"name": "Extra", "type": "text"}}),
        ("post", f"{base}/import-csv", {"json": {"csv_text": "Title\nsneaky\n"}}),
    ]:
        r = getattr(client, method)(url, headers=intruder, **kwargs)
        assert r.status_code == 403, (url, r.text)
        assert r.json()["error"]["code"] == "ACCESS_DENIED"

    assert client.get(f"{base}/rows", headers=auth_headers).json()["total_count"] == 0
    schema = client.get(base, headers=auth_headers).json()
    assert all(c["name"] != "Extra" for c in schema["columns"])


def test_embedded_databases_are_hidden_from_other_users(client, auth_headers, make_headers, embedded_db):
    intruder = make_headers("intruder@example.com")
    listed = client.get("/databases", headers=intruder).json()
    assert embedded_db["database_id"] not in [d["database_id"] for d in listed]
    listed = client.get("/databases", headers=auth_headers).json()
    assert embedded_db["database_id"] in [d["database_id"] for d in listed]


def test_cannot_create_inside_someone_elses_document(client, make_headers, owner_doc):
    intruder = make_headers("intruder@example.com")
    r = client.post(
        "/databases", json={"name": "Squatter", "document_id": owner_doc["id"]}, headers=intruder
    )
    assert r.status_code == 403
    assert r.json()["error"]["code"] == "ACCESS_DENIED"


def test_standalone_databases_are_shared(client, auth_headers, make_headers):
    db = client.post("/databases", json={"name": "Shared", "kind": "task"}, headers=auth_headers).json()
    other = make_headers("colleague@example.com")
    r = client.post(
        f"/databases/{db['database_id']}/rows", json={"cells": {"Title": "from colleague"}}, headers=other
    )
    assert r.status_code == 201, r.text


def test_unknown_database_is_not_found(client, auth_headers):
    r = client.get("/databases/db-missing/rows", headers=auth_headers)
    assert r.status_code == 404


def test_requests_without_token_are_rejected(client, embedded_db):
    r = client.get(f"/databases/{embedded_db['database_id']}/rows")
    assert r.status_code == 401


# ---- unit level ----


def test_authorize_rules(db_session, store, user):
    doc = Document(owner_id=user.id, title="Notes")
    db_session.add(doc)
    db_session.commit()
    embedded = crud_db.create_database(db_session, store, user_id=user.id, name="In doc", document_id=doc.id)
    standalone = crud_db.create_database(db_session, store, user_id=user.id, name="Loose")

    assert authorize(db_session, user_id=user.id, database_id=embedded.database_id) is True
    assert authorize(db_session, user_id="someone-else", database_id=embedded.database_id) is False
    assert authorize(db_session, user_id="someone-else", database_id=standalone.database_id) is True
    assert authorize(db_session, user_id=user.id, database_id="db-missing") is False

    with pytest.raises(AccessDenied):
        require_database_access(db_session, user_id="someone-else", database_id=embedded.database_id)
