"""
services/activity_log.py

운영진 행위 로그 기록 서비스.

관리자/봉사자가 수행한 주요 행위를 ActivityLog 테이블에 기록한다.
로그 기록 자체는 DB에만 영향을 주고 비즈니스 흐름에는 개입하지 않는다.

"""

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.activity_log import ActivityLog, ActivityAction
from app.models.user import User


"""
행위 로그 기록 함수

- actor          : 행위를 수행한 사용자
- action         : 수행된 행위 유형
- details        : 상세 내용 (선택)
- target_user_id : 권한 변경 대상 사용자 ID (선택)
- ip             : 요청 IP 주소 (선택)

NOTE:
- db.commit()은 호출 측(라우터)에서 수행

"""
def write_activity_log(
    db: Session,
    *,
    actor: User,
    action: ActivityAction,
    details=None,
    target_user_id=None,
    ip=None,
):
    log = ActivityLog(
        actor_id=actor.id,
        actor_email=actor.email,
        action=action,
        details=details,
        target_user_id=target_user_id,
        ip=ip,
    )
    db.add(log)
    return log


def list_activity_logs(db: Session, *, action: ActivityAction | None = None, limit: int = 100) -> list[ActivityLog]:
    stmt = select(ActivityLog)
    if action is not None:
        stmt = stmt.where(ActivityLog.action == action)
    return list(db.scalars(stmt.order_by(ActivityLog.created_at.desc()).limit(limit)).all())
