"""
public.py

회원 검증(Validate) API.

- POST /validate            : 누구나 (로그인 불필요)
- POST /volunteer/validate  : 봉사자 이상, 검증 행위를 ActivityLog에 기록

응답에는 이름 / 만료일 / 집 전화 / 등급 / 활성 여부만 포함되고
이메일 등 나머지 필드는 노출하지 않는다.

"""

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.core.deps import get_current_volunteer, get_db, get_roster_store
from app.db.roster_store import RosterStore
from app.models.activity_log import ActivityAction
from app.models.user import User
from app.schemas.member import ValidateRequest
from app.services.activity_log import write_activity_log
from app.services.members import validate_membership

router = APIRouter(tags=["validate"])


@router.post("/validate")
def validate(
    data: ValidateRequest,
    store: RosterStore = Depends(get_roster_store),
):
    result = validate_membership(store, data.membership_id)
    return {"data": result.model_dump(mode="json")}


@router.post("/volunteer/validate")
def volunteer_validate(
    data: ValidateRequest,
    request: Request,
    db: Session = Depends(get_db),
    store: RosterStore = Depends(get_roster_store),
    volunteer: User = Depends(get_current_volunteer),
):
    result = validate_membership(store, data.membership_id)

    try:
        write_activity_log(
            db,
            actor=volunteer,
            action=ActivityAction.VALIDATE_MEMBER,
            details=f"{data.membership_id.strip()} -> {result.status}",
            ip=request.client.host if request.client else None,
        )
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    return {"data": result.model_dump(mode="json")}
