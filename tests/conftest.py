import os

# app import 전에 필수 설정 채우기 (.env 없이도 테스트 가능하도록)
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("REFRESH_SECRET_KEY", "test-refresh-secret-key")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app as fastapi_app
from app.core.config import settings
from app.core.deps import get_db, get_optional_db
from app.db.base import Base
from app.db.blob_store import LocalBlobStore
from app.db.roster_store import SqlRosterStore

# ✅ 모델 import (Base.metadata에 테이블 등록)
import app.models  # noqa: F401


# TEST_DATABASE_URL이 없으면 in-memory SQLite 사용
TEST_DB_URL = settings.TEST_DATABASE_URL or os.getenv("TEST_DATABASE_URL")

if TEST_DB_URL:
    engine = create_engine(TEST_DB_URL, pool_pre_ping=True)
else:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
TestingSessionLocal = sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session", autouse=True)
def setup_test_db():
    """테스트 전체 시작/종료 때만 스키마 생성/삭제"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(autouse=True)
def clean_tables():
    """각 테스트마다 데이터 초기화 (테이블은 유지, row만 삭제)"""
    # FK 의존 순서의 역순으로 삭제
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture()
def db_session():
    """테스트에서 직접 DB 조작할 때 쓰는 세션"""
    session = TestingSessionLocal()
    try:
        yield session
        session.commit()
    finally:
        session.close()


@pytest.fixture()
def roster_store():
    return SqlRosterStore(TestingSessionLocal)


@pytest.fixture()
def blob_store(tmp_path):
    return LocalBlobStore(tmp_path / "blobs")


@pytest.fixture()
def client(roster_store, blob_store):
    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_optional_db] = override_get_db

    saved = (fastapi_app.state.roster_store, fastapi_app.state.blob_store)
    fastapi_app.state.roster_store = roster_store
    fastapi_app.state.blob_store = blob_store

    with TestClient(fastapi_app) as c:
        yield c

    fastapi_app.state.roster_store, fastapi_app.state.blob_store = saved
    fastapi_app.dependency_overrides.clear()
