"""
DATABASE_URL 미설정 모드 테스트.
- 명단 저장소는 NullRosterStore: 공개 검증은 invalid, 사용자 테이블이 필요한 API는 503
"""

import pytest
from fastapi.testclient import TestClient

from app.main import app as fastapi_app
from app.db.roster_store import NullRosterStore, create_roster_store


@pytest.fixture()
def bare_client(blob_store):
    saved = (fastapi_app.state.roster_store, fastapi_app.state.blob_store)
    fastapi_app.state.roster_store = create_roster_store(None)
    fastapi_app.state.blob_store = blob_store
    fastapi_app.dependency_overrides.clear()

    with TestClient(fastapi_app) as c:
        yield c

    fastapi_app.state.roster_store, fastapi_app.state.blob_store = saved


def test_factory_returns_null_store():
    assert isinstance(create_roster_store(None), NullRosterStore)


def test_health_reports_storage_not_configured(bare_client):
    r = bare_client.get("/health")
    assert r.status_code == 200
    assert r.json()["storage_configured"] is False


def test_validate_without_database(bare_client):
    r = bare_client.post("/validate", json={"membership_id": "1001"})
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "invalid"


def test_auth_routes_answer_503(bare_client, monkeypatch):
    from app.db import session as db_session

    monkeypatch.setattr(db_session, "SessionLocal", None)

    r = bare_client.post("/auth/login", json={"email": "a@test.com", "password": "whatever1"})
    assert r.status_code == 503
    assert r.json()["detail"] == "Database is not configured"

    assert bare_client.get("/db-ping").status_code == 503
    assert bare_client.get("/auth/me").json()["data"]["role"] == "public"
