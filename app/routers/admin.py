import uuid
from fastapi import APIRouter, Depends, HTTPException, Request

from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.deps import get_db, get_current_admin
from app.core.logging import get_logger
from app.schemas.user import RoleUpdate, UserResponse, ActivityLogResponse

from app.models.user import User
from app.models.activity_log import ActivityAction

from app.services.activity_log import write_activity_log, list_activity_logs
from app.services.admin import check_role_change


router = APIRouter(prefix="/admin", tags=["admin"])
logger = get_logger(__name__)


# 전체 운영진 계정 목록 (가입순)
@router.get("/users")
def list_users(
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    users = db.scalars(select(User).order_by(User.created_at)).all()
    return {
        "data": [UserResponse.model_validate(u).model_dump(mode="json") for u in users]
    }


# 관리자가 사용자 권한을 변경하는 엔드포인트
@router.patch("/users/{user_id}/role")
def set_role(
    user_id: uuid.UUID,
    data: RoleUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_admin: User = Depends(get_current_admin),
):
    user = db.scalar(select(User).where(User.id == user_id))

    # 해당 사용자가 존재하지 않는 경우
    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        check_role_change(db, actor=current_admin, target=user, new_role=data.role)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    before = user.role

    try:
        user.role = data.role
        write_activity_log(
            db,
            actor=current_admin,
            action=ActivityAction.SET_ROLE,
            target_user_id=user.id,
            details=f"{before.value} -> {user.role.value}",
            ip=request.client.host if request.client else None,
        )
        db.commit()
        db.refresh(user)
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    logger.info("role changed user_id=%s %s -> %s by=%s", user.id, before.value, user.role.value, current_admin.id)
    return {
        "message": "Role updated",
        "data": {
            "id": str(user.id),
            "name": user.name,
            "email": user.email,
            "before_role": before.value,
            "role": user.role.value,
        },
    }


# 운영진 행위 로그 조회 엔드포인트
@router.get("/logs")
def list_logs(
    limit: int = 50,
    action: ActivityAction | None = None,
    db: Session = Depends(get_db),
    _: User = Depends(get_current_admin),
):
    limit = max(1, min(limit, 200))

    logs = list_activity_logs(db, action=action, limit=limit)
    result = [ActivityLogResponse.model_validate(log).model_dump(mode="json") for log in logs]
    return {
        "data": result,
        "meta": {
            "limit": limit,
            "count": len(result),
        },
    }
