"""
datasets.py

관리자 명단 데이터셋 관리 API.

회원 명단 파일(CSV / XLSX / XLS)을 업로드하여 활성 데이터셋으로 교체하고,
저장된 데이터셋을 다시 활성화하거나 삭제하는 엔드포인트를 제공한다.

주요 기능:
- 명단 파일 업로드 (헤더 검증 후 활성 데이터셋 교체)
- 저장된 데이터셋 목록 조회
- 저장된 데이터셋 재활성화
- 데이터셋 삭제
- 전체 회원 행 삭제 (데이터셋 원본은 유지)
- 업로드 기록 조회

설계 원칙:
- 모든 엔드포인트는 ADMIN 전용
- 실제 처리는 app.services.datasets에 위임하고 결과 status를 HTTP 코드로 변환
  (success → 200, error → 400, not_configured → 503)
- 성공한 변경은 ActivityLog에 기록

관련 파일:
- app.services.datasets  : 업로드 / 활성화 / 삭제 로직
- app.db.roster_store    : 명단 저장소
- app.db.blob_store      : 원본 파일 저장소

"""

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.deps import get_blob_store, get_current_admin, get_db, get_roster_store
from app.core.logging import get_logger
from app.db.blob_store import BlobStore
from app.db.roster_store import RosterStore
from app.models.activity_log import ActivityAction
from app.models.user import User
from app.services import datasets as dataset_service
from app.services.activity_log import write_activity_log

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin-datasets"])

RESULT_STATUS_CODES = {
    "success": status.HTTP_200_OK,
    "error": status.HTTP_400_BAD_REQUEST,
    "not_configured": status.HTTP_503_SERVICE_UNAVAILABLE,
}


def _client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


# 명단 변경은 이미 커밋된 뒤이므로 로그 기록 실패는 응답 상태를 바꾸지 않음
def _log_action(db: Session, request: Request, admin: User, action: ActivityAction, details: str) -> None:
    try:
        write_activity_log(db, actor=admin, action=action, details=details, ip=_client_ip(request))
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("failed to write activity log action=%s details=%s", action.value, details)


"""
명단 파일 업로드 API

- multipart/form-data 의 file 필드
- MAX_UPLOAD_BYTES 초과 시 413
- 헤더 누락 시 400 + missing_headers 목록
- 성공 시 새 데이터셋이 유일한 활성 데이터셋이 됨

"""

@router.post("/datasets/upload")
def upload_dataset(
    request: Request,
    response: Response,
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    store: RosterStore = Depends(get_roster_store),
    blobs: BlobStore = Depends(get_blob_store),
    admin: User = Depends(get_current_admin),
):
    data = file.file.read(settings.MAX_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File is larger than {settings.MAX_UPLOAD_BYTES} bytes",
        )

    filename = file.filename or "upload.csv"
    result = dataset_service.upload_roster(
        store,
        blobs,
        data=data,
        filename=filename,
        uploaded_by=admin.email,
        user_id=admin.id,
    )

    if result.status == "success":
        _log_action(db, request, admin, ActivityAction.UPLOAD_DATASET, f"{filename} ({result.members_added} members)")

    response.status_code = RESULT_STATUS_CODES[result.status]
    return {"message": result.message, "data": result.model_dump(mode="json")}


# 저장된 데이터셋 목록 (최신순)
@router.get("/datasets")
def list_datasets(
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    return {"data": [d.model_dump(mode="json") for d in store.list_datasets()]}


@router.post("/datasets/{dataset_id}/activate")
def activate_dataset(
    dataset_id: int,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: RosterStore = Depends(get_roster_store),
    blobs: BlobStore = Depends(get_blob_store),
    admin: User = Depends(get_current_admin),
):
    result = dataset_service.activate_dataset(store, blobs, dataset_id)

    if result.status == "success":
        _log_action(db, request, admin, ActivityAction.ACTIVATE_DATASET, f"dataset {dataset_id}")

    response.status_code = RESULT_STATUS_CODES[result.status]
    return {"message": result.message, "data": result.model_dump(mode="json")}


@router.delete("/datasets/{dataset_id}")
def delete_dataset(
    dataset_id: int,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: RosterStore = Depends(get_roster_store),
    blobs: BlobStore = Depends(get_blob_store),
    admin: User = Depends(get_current_admin),
):
    result = dataset_service.delete_dataset(store, blobs, dataset_id)

    if result.status == "success":
        _log_action(db, request, admin, ActivityAction.DELETE_DATASET, f"dataset {dataset_id}")

    response.status_code = RESULT_STATUS_CODES[result.status]
    return {"message": result.message, "data": result.model_dump(mode="json")}


"""
전체 회원 삭제 API

- 모든 회원 행 삭제 + 모든 데이터셋 비활성화
- 데이터셋 메타데이터와 원본 파일은 남겨 두어 나중에 다시 활성화 가능

"""

@router.delete("/members")
def clear_members(
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
    store: RosterStore = Depends(get_roster_store),
    admin: User = Depends(get_current_admin),
):
    result = dataset_service.clear_all_members(store)

    if result.status == "success":
        _log_action(db, request, admin, ActivityAction.CLEAR_MEMBERS, f"{result.members} members removed")

    response.status_code = RESULT_STATUS_CODES[result.status]
    return {"message": result.message, "data": result.model_dump(mode="json")}


# 업로드 기록 조회 (최신순)
@router.get("/uploads")
def list_uploads(
    limit: int = 50,
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    limit = max(1, min(limit, 200))
    uploads = store.list_uploads(limit)
    return {
        "data": [u.model_dump(mode="json") for u in uploads],
        "meta": {"limit": limit, "count": len(uploads)},
    }
