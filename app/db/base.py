"""
base.py

SQLAlchemy ORM Base 정의 파일.

모든 모델(User, Dataset, Member, ActivityLog, UploadHistory)은
이 Base를 기준으로 테이블 메타데이터가 관리된다.
스키마 생성은 앱 시작 시(또는 테스트 세션 시작 시) Base.metadata.create_all로 수행한다.

설계 원칙:
- Base 정의는 단일 파일에서만 관리
- 모델 간 순환 참조 방지

관련 파일:
- app.models.*            : 모든 ORM 모델
- app.main                : 시작 시 테이블 생성

"""

from sqlalchemy.orm import declarative_base

# 모든 ORM 모델이 상속받는 Base 클래스
Base = declarative_base()
