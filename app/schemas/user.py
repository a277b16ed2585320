from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from app.models.user import Role
from app.models.activity_log import ActivityAction


# 🔹 관리자 role 변경 요청용
class RoleUpdate(BaseModel):
    role: Role


# 🔹 유저 응답용 (필요한 필드만)
class UserResponse(BaseModel):
    id: UUID
    email: str
    name: str
    role: Role
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)  # SQLAlchemy → Pydantic 변환


class ActivityLogResponse(BaseModel):
    id: UUID
    actor_email: str | None
    target_user_id: UUID | None
    action: ActivityAction
    details: str | None
    ip: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
