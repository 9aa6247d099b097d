# File: /tests/test_router_smoke.py | Version: 2.0 | Path: /tests/test_router_smoke.py
def test_openapi_has_core_routes(client):
    # Ask FastAPI for its OpenAPI schema and verify key routes exist
    r = client.get("/openapi.json")
    assert r.status_code == 200, r.text
    paths = r.json().get("paths", {})

    expected = {
        "/databases": ["get", "post"],
        "/databases/{database_id}": ["get", "delete"],
        "/databases/{database_id}/columns": ["post"],
        "/databases/{database_id}/columns/{column_id}": ["patch", "delete"],
        "/databases/{database_id}/rows": ["get", "post"],
        "/databases/{database_id}/rows/{row_id}": ["patch"],
        "/databases/{database_id}/rows/delete": ["post"],
        "/databases/{database_id}/import-csv": ["post"],
        "/trash": ["get", "delete"],
        "/trash/purge": ["post"],
        "/trash/{trash_id}/restore": ["post"],
        "/trash/{trash_id}": ["delete"],
        "/snapshots": ["get"],
        "/snapshots/{token}": ["get"],
        "/tools": ["get"],
        "/tools/{name}": ["post"],
        "/documents": ["get", "post"],
    }

    missing = []
    for p, methods in expected.items():
        if p not in paths:
            missing.append(f"{p} (missing path)")
            continue
        present = {m.lower() for m in paths[p].keys()}
        for m in methods:
            if m not in present:
                missing.append(f"{p} missing {m.upper()}")

    assert not missing, "Missing routes: " + ", ".join(missing)


def test_health_endpoints(client):
    assert client.get("/healthz").json() == {"status": "ok"}
    r = client.get("/readyz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "db": "ok"}
