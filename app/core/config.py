"""
config.py

애플리케이션 전역 설정(Configuration) 관리 파일.

이 파일은 .env 환경 변수들을 Pydantic BaseSettings를 통해 로드하여
애플리케이션 전반에서 공통으로 사용하는 설정 값을 제공한다.

주요 설정 항목:
- 데이터베이스 연결 정보 (없으면 "미설정" 모드로 동작)
- JWT 인증 관련 시크릿 및 만료 정책
- 쿠키 보안 옵션 / CORS 허용 도메인 목록
- 명단 업로드 원본 파일 저장 경로(BLOB_DIR) 및 업로드 크기 제한
- 통계/검색 기본값, 로그 레벨

설계 원칙:
- 모든 환경 변수는 이 파일을 통해서만 접근
- 로컬 / 테스트 / 운영 환경을 .env로 분리하여 관리
- 설정 값은 런타임 중 변경되지 않는 불변 객체로 취급

관련 파일:
- app.main               : CORS 및 앱 초기화 시 설정 사용
- app.core.security      : JWT 시크릿 / 만료 설정 사용
- app.db.session         : DATABASE_URL 사용
- app.db.blob_store      : BLOB_DIR 사용

"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


# .env 파일에 정의된 환경 변수를 로드하는 설정 클래스
# extra="ignore" 옵션으로 정의되지 않은 환경 변수는 무시
class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # DATABASE_URL이 없으면 명단 저장소는 NullRosterStore(읽기 빈 결과 / 쓰기 not_configured)로 동작
    DATABASE_URL: str | None = None
    TEST_DATABASE_URL: str | None = None
    CREATE_TABLES_ON_STARTUP: bool = True

    SECRET_KEY: str
    REFRESH_SECRET_KEY: str
    ALGORITHM: str = "HS256"

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 14

    # 쿠키/배포 옵션
    # - COOKIE_SECURE: HTTPS 환경에서만 True 권장
    # - COOKIE_SAMESITE: CSRF 완화를 위해 "lax" 기본값
    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: str = "lax"
    COOKIE_DOMAIN: str | None = None

    # CORS 허용 도메인 (프론트엔드 주소)
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # 업로드된 명단 원본 파일 저장 위치
    BLOB_DIR: str = "./data/blobs"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # 만료 임박 기준 (일)
    EXPIRING_SOON_DAYS: int = 30
    SEARCH_PAGE_SIZE: int = 20

    LOG_LEVEL: str = "INFO"


# 애플리케이션 전역에서 import하여 사용하는 Settings 인스턴스
# 실행 시 한 번만 생성됨
settings = Settings()
