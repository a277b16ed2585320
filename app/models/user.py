"""
user.py

스태프 사용자(User) 및 권한(Role) 모델 정의 파일.

명단 검증 서비스에 로그인하는 운영진 계정과 그 권한을 관리한다.
회원 명단(Member)과는 별개이며, 인증/권한 확인의 기준이 되는 모델이다.

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import String, Integer, DateTime, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


"""
사용자 권한(Role) 정의

- USER       : 가입만 한 일반 사용자 (공개 기능만 사용)
- VOLUNTEER  : 회원 검증 담당 봉사자
- ADMIN      : 명단 업로드 / 조회 / 통계 / 권한 관리

로그인하지 않은 호출자는 "public"으로 취급한다 (DB에 저장되지 않음).

"""

class Role(str, Enum):
    USER = "user"
    VOLUNTEER = "volunteer"
    ADMIN = "admin"


PUBLIC_ROLE = "public"


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")

    role: Mapped[Role] = mapped_column(default=Role.USER)

    refresh_token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.datetime.now(datetime.timezone.utc),
        nullable=False,
    )
