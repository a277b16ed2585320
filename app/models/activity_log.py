"""

activity_log.py

운영진 행위 기록(Audit Log) 모델 정의 파일.

관리자/봉사자가 수행한 주요 행위
(명단 업로드, 활성화, 삭제, 전체 삭제, 권한 변경, 회원 검증)를
DB에 영구적으로 기록하기 위한 로그 테이블을 정의한다.

설계 원칙:
- 실제 데이터 변경과 로그 기록을 분리
- 로그 데이터는 수정/삭제하지 않는 것을 전제로 설계
- actor(행위자)와 target(대상 사용자)을 명확히 구분

"""

import uuid
import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ActivityAction(str, Enum):
    UPLOAD_DATASET = "UPLOAD_DATASET"
    ACTIVATE_DATASET = "ACTIVATE_DATASET"
    DELETE_DATASET = "DELETE_DATASET"
    CLEAR_MEMBERS = "CLEAR_MEMBERS"
    SET_ROLE = "SET_ROLE"
    VALIDATE_MEMBER = "VALIDATE_MEMBER"


"""
운영진 행위 로그 모델

- actor_id       : 행위를 수행한 사용자 ID
- actor_email    : 행위 시점의 이메일 (계정 삭제 후에도 추적 가능하도록 복사)
- target_user_id : 권한 변경 대상 사용자 ID (없을 수 있음)
- action         : 수행된 행위 유형
- details        : 사람이 읽을 수 있는 상세 내용
- ip             : 요청 IP 주소
- created_at     : 행위 발생 시각 (UTC)

"""

class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    actor_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    actor_email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    target_user_id: Mapped[uuid.UUID | None] = mapped_column(Uuid, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    action: Mapped[ActivityAction] = mapped_column(SAEnum(ActivityAction, name="activity_action"), nullable=False)
    details: Mapped[str | None] = mapped_column(Text, nullable=True)

    ip: Mapped[str | None] = mapped_column(String(64), nullable=True)

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.datetime.now(datetime.timezone.utc),
        nullable=False,
    )
