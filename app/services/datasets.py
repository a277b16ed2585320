"""
services/datasets.py

명단 데이터셋(Dataset) 업로드 / 활성화 / 삭제 비즈니스 로직.

이 파일은 파서(roster_parser)와 매퍼(roster_mapper)를 조립하여
"업로드 파일 → 활성 데이터셋" 흐름을 수행하고,
결과를 예외가 아닌 status/message 결과 객체로 돌려준다.

주요 기능:
- 업로드: 파싱 → 빈 파일 검사 → 헤더 검증 → 행 매핑 → 원본 저장 → 활성 데이터셋 교체
- 활성화: 저장된 원본을 다시 읽어 파이프라인 재실행 후 회원 행 교체 + 활성 전환
- 삭제: 회원 행 + 메타데이터 + 원본 파일 함께 삭제
- 전체 회원 삭제: 모든 회원 행 삭제, 활성 데이터셋 없음 상태로 전환

설계 원칙:
- HTTP / FastAPI 의존성 없음
- 입력 오류(빈 파일, 읽기 실패, 헤더 누락)는 기존 활성 데이터셋을 건드리지 않음
- 저장소 미설정(NullRosterStore)은 status="not_configured"로 보고

관련 파일:
- app.services.roster_parser : 파일 → (headers, rows)
- app.services.roster_mapper : 헤더 검증 / MemberRecord 변환
- app.db.roster_store        : 데이터셋 / 회원 저장소
- app.db.blob_store          : 원본 파일 저장소
- app.routers.datasets       : 관리자 데이터셋 API

"""

import datetime
import uuid

from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    BlobNotFoundError,
    DatasetNotFoundError,
    MissingHeadersError,
    RosterFileError,
    StorageNotConfiguredError,
)
from app.core.logging import get_logger
from app.db.blob_store import BlobStore
from app.db.roster_store import RosterStore
from app.schemas.dataset import DatasetActionResult, UploadResult
from app.schemas.member import MemberRecord
from app.services.roster_mapper import map_rows, validate_headers
from app.services.roster_parser import parse_roster_file

logger = get_logger(__name__)


class PipelineFailure(Exception):
    def __init__(self, message: str, missing: list[str] | None = None):
        self.message = message
        self.missing = missing or []
        super().__init__(message)


"""
파일 바이트 → MemberRecord 목록 (업로드 / 활성화 공통)

- 읽기 실패, 내용 행 없음, 필수 헤더 누락 시 PipelineFailure

"""

def run_pipeline(data: bytes, filename: str, today: datetime.date | None = None) -> list[MemberRecord]:
    try:
        table = parse_roster_file(data, filename)
    except RosterFileError as e:
        raise PipelineFailure(f"Failed to process file. Error: {e}") from e

    if table.is_empty:
        raise PipelineFailure("The file is empty or contains only a header.")

    try:
        validate_headers(table.headers)
    except MissingHeadersError as e:
        raise PipelineFailure(str(e), e.missing) from e

    return map_rows(table.headers, table.rows, today)


def _record_upload(store: RosterStore, *, user_id, user_email, filename, count, status, error=None) -> None:
    if not store.configured:
        return
    try:
        store.record_upload(
            user_id=user_id,
            user_email=user_email,
            file_name=filename,
            records_count=count,
            status=status,
            error_message=error,
        )
    except SQLAlchemyError:
        # 업로드 기록 실패가 업로드 결과를 바꾸지 않도록 로그만 남김
        logger.exception("failed to record upload history file=%s", filename)


def _discard_blob(blobs: BlobStore, url: str) -> None:
    try:
        blobs.delete(url)
    except OSError:
        # 메타데이터는 이미 정리됨. 남은 파일은 로그로만 알림
        logger.exception("failed to delete stored file url=%s", url)


"""
명단 파일 업로드

- data가 비어 있으면 오류
- 파이프라인 통과 후 원본을 blob에 저장하고, 새 데이터셋을 활성으로 등록
- 원본 저장 실패(OSError)도 오류 결과로 반환
- DB 저장 실패 시 방금 저장한 blob을 지움
- 성공/실패 모두 업로드 기록(UploadHistory)에 남김

"""

def upload_roster(
    store: RosterStore,
    blobs: BlobStore,
    *,
    data: bytes,
    filename: str,
    uploaded_by: str | None = None,
    user_id: uuid.UUID | None = None,
    today: datetime.date | None = None,
) -> UploadResult:
    if not data:
        return UploadResult(status="error", message="Please select a file to upload.")

    if not store.configured:
        return UploadResult(status="not_configured", message=str(StorageNotConfiguredError()))

    def _fail(message: str, missing: list[str] | None = None) -> UploadResult:
        logger.info("roster upload rejected file=%s reason=%s", filename, message)
        _record_upload(
            store, user_id=user_id, user_email=uploaded_by, filename=filename, count=0, status="failed", error=message
        )
        return UploadResult(status="error", message=message, missing_headers=missing or [])

    try:
        members = run_pipeline(data, filename, today)
    except PipelineFailure as e:
        return _fail(e.message, e.missing)

    try:
        url = blobs.put(filename, data)
    except OSError as e:
        logger.exception("failed to store roster file file=%s", filename)
        return _fail(f"Failed to store file. Error: {type(e).__name__}")

    try:
        dataset = store.create_active_dataset(name=filename, url=url, uploaded_by=uploaded_by, members=members)
    except SQLAlchemyError as e:
        logger.exception("failed to save dataset file=%s", filename)
        _discard_blob(blobs, url)
        return _fail(f"Failed to save dataset. Database error: {type(e).__name__}")

    _record_upload(
        store, user_id=user_id, user_email=uploaded_by, filename=filename, count=len(members), status="success"
    )
    logger.info("roster uploaded dataset_id=%s file=%s members=%d", dataset.id, filename, len(members))
    return UploadResult(
        status="success",
        message=f"Successfully loaded {len(members)} members from {filename}.",
        members_added=len(members),
        dataset_id=dataset.id,
    )


"""
저장된 데이터셋 활성화

- 원본 파일을 blob에서 다시 읽어 헤더부터 재검증
- 검증 실패 시 현재 활성 데이터셋은 그대로 유지

"""

def activate_dataset(
    store: RosterStore,
    blobs: BlobStore,
    dataset_id: int,
    today: datetime.date | None = None,
) -> DatasetActionResult:
    if not store.configured:
        return DatasetActionResult(status="not_configured", message=str(StorageNotConfiguredError()))

    dataset = store.get_dataset(dataset_id)
    if dataset is None:
        return DatasetActionResult(status="error", message="Dataset not found", dataset_id=dataset_id)

    try:
        data = blobs.get(dataset.url)
        members = run_pipeline(data, dataset.name, today)
    except BlobNotFoundError as e:
        logger.warning("dataset activation failed dataset_id=%s reason=%s", dataset_id, e)
        return DatasetActionResult(status="error", message=str(e), dataset_id=dataset_id)
    except OSError as e:
        logger.exception("failed to read stored file dataset_id=%s", dataset_id)
        return DatasetActionResult(
            status="error", message=f"Failed to read stored file. Error: {type(e).__name__}", dataset_id=dataset_id
        )
    except PipelineFailure as e:
        logger.warning("dataset activation failed dataset_id=%s reason=%s", dataset_id, e.message)
        return DatasetActionResult(status="error", message=e.message, dataset_id=dataset_id)

    try:
        activated = store.replace_members_and_activate(dataset_id, members)
    except DatasetNotFoundError:
        # 조회 이후 다른 요청이 삭제한 경우
        return DatasetActionResult(status="error", message="Dataset not found", dataset_id=dataset_id)
    except SQLAlchemyError as e:
        logger.exception("failed to activate dataset dataset_id=%s", dataset_id)
        return DatasetActionResult(
            status="error", message=f"Failed to activate dataset. Database error: {type(e).__name__}", dataset_id=dataset_id
        )

    logger.info("dataset activated dataset_id=%s members=%d", dataset_id, activated.row_count)
    return DatasetActionResult(
        status="success",
        message=f'Dataset "{activated.name}" is now active with {activated.row_count} members.',
        dataset_id=dataset_id,
        members=activated.row_count,
    )


def delete_dataset(store: RosterStore, blobs: BlobStore, dataset_id: int) -> DatasetActionResult:
    if not store.configured:
        return DatasetActionResult(status="not_configured", message=str(StorageNotConfiguredError()))

    deleted = store.delete_dataset(dataset_id)
    if deleted is None:
        return DatasetActionResult(status="error", message="Dataset not found", dataset_id=dataset_id)

    _discard_blob(blobs, deleted.url)

    message = f'Deleted dataset "{deleted.name}".'
    if deleted.is_active:
        message += " No dataset is active now."
    logger.info("dataset deleted dataset_id=%s was_active=%s", dataset_id, deleted.is_active)
    return DatasetActionResult(status="success", message=message, dataset_id=dataset_id, members=deleted.row_count)


def clear_all_members(store: RosterStore) -> DatasetActionResult:
    if not store.configured:
        return DatasetActionResult(status="not_configured", message=str(StorageNotConfiguredError()))

    removed = store.clear_members()
    logger.info("all members cleared removed=%d", removed)
    return DatasetActionResult(
        status="success",
        message=f"Removed {removed} members. Stored dataset files were kept.",
        members=removed,
    )
