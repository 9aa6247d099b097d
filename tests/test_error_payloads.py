# File: /tests/test_error_payloads.py | Version: 1.0 | Path: /tests/test_error_payloads.py
def _assert_envelope(r, status, code):
    assert r.status_code == status, r.text
    body = r.json()
    assert set(body) == {"error"}
    assert body["error"]["code"] == code
    assert isinstance(body["error"]["message"], str) and body["error"]["message"]


def test_missing_token(client):
    _assert_envelope(client.get("/databases"), 401, "UNAUTHORIZED")


def test_unknown_route(client):
    _assert_envelope(client.get("/no/such/route"), 404, "NOT_FOUND")


def test_request_validation(client, auth_headers):
    r = client.post("/databases", json={"kind": "task"}, headers=auth_headers)
    _assert_envelope(r, 422, "UNPROCESSABLE_ENTITY")
    assert "name" in r.json()["error"]["message"]


def test_domain_errors(client, auth_headers):
    _assert_envelope(client.get("/databases/db-missing", headers=auth_headers), 404, "NOT_FOUND")
    r = client.post(
        "/databases",
        json={"name": "Dup", "columns": [{"name": "A", "type": "text"}, {"name": "A", "type": "number"}]},
        headers=auth_headers,
    )
    _assert_envelope(r, 400, "VALIDATION_ERROR")
