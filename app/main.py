"""
main.py

FastAPI 애플리케이션 진입점(Entry Point).

이 파일은 서버 실행 시 가장 먼저 로드되며,
애플리케이션 전반의 설정과 라우터 등록을 담당한다.

주요 역할:
- FastAPI 앱 인스턴스 생성
- CORS 미들웨어 설정
- 프로세스 단위 저장소(명단 저장소 / 원본 파일 저장소)를 app.state에 등록
- 시작 시 테이블 생성 (CREATE_TABLES_ON_STARTUP)
- 각 도메인별 라우터(auth, admin, datasets, members, validate) 등록
- 헬스 체크 및 DB 연결 상태 확인용 엔드포인트 제공

설계 원칙:
- 비즈니스 로직은 포함하지 않고 설정/조립 역할만 수행
- 실제 기능은 routers / services 계층에 위임
- DATABASE_URL이 없어도 서버는 뜨고, 명단 기능은 "미설정" 상태로 응답

관련 파일:
- app.core.config        : 환경 변수 및 설정 로드
- app.core.deps          : DB 세션 / 저장소 의존성
- app.db.roster_store    : 명단 저장소
- app.db.blob_store      : 원본 파일 저장소
- app.routers.*          : 기능별 API 라우터

"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from sqlalchemy import text

from app import models  # noqa: F401  (모든 모델을 Base.metadata에 등록)
from app.core.config import settings
from app.core.deps import get_db
from app.core.logging import get_logger
from app.db import session as db_session
from app.db.base import Base
from app.db.blob_store import LocalBlobStore
from app.db.roster_store import create_roster_store
from app.routers import auth, admin, datasets, members, public

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if db_session.engine is not None and settings.CREATE_TABLES_ON_STARTUP:
        Base.metadata.create_all(bind=db_session.engine)
        logger.info("database tables ensured")
    if db_session.engine is None:
        logger.warning("DATABASE_URL is not set; roster storage is not configured")
    yield


app = FastAPI(title="Member Validator", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 요청 간 공유하는 저장소 (테스트에서는 conftest가 교체)
app.state.roster_store = create_roster_store(db_session.SessionLocal)
app.state.blob_store = LocalBlobStore(settings.BLOB_DIR)

app.include_router(auth.router)
app.include_router(public.router)
app.include_router(admin.router)
app.include_router(datasets.router)
app.include_router(members.router)

"""
서버 헬스 체크 엔드포인트

- 애플리케이션 프로세스가 정상 동작 중인지 확인
- 명단 저장소 설정 여부도 함께 표시

"""
@app.get("/health")
def health():
    return {"status": "ok", "storage_configured": app.state.roster_store.configured}

"""
데이터베이스 연결 상태 확인 엔드포인트

- 간단한 SELECT 1 쿼리를 통해 DB 연결 여부 확인
- DB 미설정이면 get_db에서 503

"""
@app.get("/db-ping")
def db_ping(db: Session = Depends(get_db)):
    value = db.execute(text("SELECT 1")).scalar_one()
    return {"db": "ok", "value": value}
