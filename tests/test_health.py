"""
헬스 체크 / DB 연결 / CORS 설정 테스트.
"""


def test_health_reports_storage(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "storage_configured": True}


def test_db_ping_uses_test_database(client):
    body = client.get("/db-ping").json()
    assert body == {"db": "ok", "value": 1}


def test_cors_allows_frontend_origin(client):
    r = client.options(
        "/validate",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert r.status_code == 200
    assert r.headers["access-control-allow-origin"] == "http://localhost:3000"
    assert r.headers["access-control-allow-credentials"] == "true"
