"""
services/admin.py

관리자 계정 관련 정책 로직.

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 트랜잭션 제어는 라우터에서 수행
- 관리자 정책(마지막 ADMIN 보호 등)을 중앙에서 관리

관련 파일:
- app.models.user        : User / Role 모델
- app.routers.admin      : 사용자 권한 관리 API

"""

from sqlalchemy.orm import Session
from sqlalchemy import select, func
from app.models.user import User, Role


# 현재 ADMIN 계정 수 (마지막 ADMIN 강등 방지에 사용)
def count_admins(db: Session) -> int:
    return db.scalar(
        select(func.count()).select_from(User).where(User.role == Role.ADMIN)
    ) or 0


"""
권한 변경 가능 여부 검사

- 자기 자신의 권한은 변경 불가
- 이미 같은 권한이면 변경 불가
- 마지막 ADMIN은 강등 불가
- 위반 시 ValueError (라우터에서 400으로 변환)

"""

def check_role_change(db: Session, *, actor: User, target: User, new_role: Role) -> None:
    if target.id == actor.id:
        raise ValueError("Cannot change your own role")

    if target.role == new_role:
        raise ValueError(f"User already {target.role.value}")

    if target.role == Role.ADMIN and new_role != Role.ADMIN and count_admins(db) <= 1:
        raise ValueError("Cannot demote the last admin")
