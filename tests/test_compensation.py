# File: /tests/test_compensation.py | Version: 1.0 | Path: /tests/test_compensation.py
import pytest
from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.errors import BackingStoreError
from app.crud import databases as crud_db
from app.db.session import get_db
from app.main import app
from app.models import DatabaseRecord
from app.storage import SqlBackingStore, get_backing_store


class FailingStore(SqlBackingStore):
    def provision_table(self, database_id, column_ids):
        raise BackingStoreError(f"Backing store failure during provision of {database_id}")


@pytest.fixture()
def failing_store(client):
    def _override(db: Session = Depends(get_db)):
        return FailingStore(db)

    app.dependency_overrides[get_backing_store] = _override
    yield
    app.dependency_overrides.pop(get_backing_store, None)


def test_failed_provision_leaves_no_metadata(client, auth_headers, failing_store):
    r = client.post("/databases", json={"name": "Broken", "kind": "task"}, headers=auth_headers)
    assert r.status_code == 502
    assert r.json()["error"]["code"] == "BACKING_STORE_ERROR"
    assert client.get("/databases", headers=auth_headers).json() == []


def test_failed_provision_at_crud_level(db_session, user):
    with pytest.raises(BackingStoreError):
        crud_db.create_database(db_session, FailingStore(db_session), user_id=user.id, name="Broken")
    assert db_session.query(DatabaseRecord).count() == 0
