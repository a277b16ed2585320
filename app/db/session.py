"""
session.py

데이터베이스 엔진 및 세션(Session) 관리 파일.

DATABASE_URL이 설정되어 있으면 SQLAlchemy Engine과 SessionLocal을 생성하고,
설정되어 있지 않으면 engine/SessionLocal 모두 None으로 남겨
"DB 미설정" 모드임을 호출 측(get_db, create_roster_store)이 판단할 수 있게 한다.

설계 원칙:
- DB 연결 설정은 한 곳에서만 정의
- 세션 생성/종료 책임을 명확히 분리
- pool_pre_ping=True로 유휴 연결 오류 방지

관련 파일:
- app.core.config        : DATABASE_URL 설정
- app.core.deps          : get_db 의존성
- app.db.roster_store    : 명단 저장소

"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from app.core.config import settings


def build_engine(url: str) -> Engine:
    # SQLite는 TestClient 스레드에서도 같은 연결을 써야 하므로 check_same_thread 해제
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


engine = build_engine(settings.DATABASE_URL) if settings.DATABASE_URL else None

# 요청 단위로 사용할 세션 팩토리 (DB 미설정이면 None)
SessionLocal = build_session_factory(engine) if engine is not None else None
