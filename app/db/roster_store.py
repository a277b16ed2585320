"""
roster_store.py

회원 명단(Member) / 데이터셋(Dataset) 저장소.

프로세스당 하나의 인스턴스를 앱 시작 시 만들어(app.main)
의존성(get_roster_store)으로 주입한다. 서비스 계층은 저장소를 인자로 받는다.

구현:
- SqlRosterStore  : SQLAlchemy 세션 팩토리 기반 (운영 / 테스트)
- NullRosterStore : DATABASE_URL 미설정 시. 읽기는 빈 결과, 쓰기는 StorageNotConfiguredError

설계 원칙:
- 모든 읽기는 "쿼리 시점의" 활성 데이터셋만 대상으로 함
- 데이터셋 교체(활성 플래그 변경 + 회원 행 교체)는 하나의 트랜잭션으로 처리
- 반환 값은 세션과 분리된 pydantic 모델 (MemberRecord / DatasetInfo)

관련 파일:
- app.models.member / app.models.dataset / app.models.upload_history
- app.services.datasets : 업로드 / 활성화 / 삭제 흐름
- app.services.members  : 검증 / 조회 / 검색 / 통계 / 내보내기

"""

import datetime
import uuid
from typing import Iterable, Protocol, Sequence

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.orm import Session, sessionmaker

from app.core.exceptions import DatasetNotFoundError, StorageNotConfiguredError
from app.core.logging import get_logger
from app.models.dataset import Dataset
from app.models.member import Member
from app.models.upload_history import UploadHistory
from app.schemas.dataset import DatasetInfo, UploadHistoryResponse
from app.schemas.member import MemberRecord, SearchFilters

logger = get_logger(__name__)

# group_count / distinct_values 에 허용하는 열
GROUPABLE_COLUMNS = {
    "region": Member.region,
    "school_name": Member.school_name,
    "membership_level": Member.membership_level,
}


class RosterStore(Protocol):
    configured: bool

    # 읽기 (활성 데이터셋 기준)
    def count_members(self) -> int: ...
    def find_member(self, member_number: str) -> MemberRecord | None: ...
    def search_members(
        self, filters: SearchFilters, *, today: datetime.date, offset: int = 0, limit: int | None = None
    ) -> tuple[list[MemberRecord], int]: ...
    def count_expiring(self, *, after: datetime.date, until: datetime.date | None = None) -> int: ...
    def group_count(self, column: str) -> list[tuple[str, int]]: ...
    def distinct_values(self, column: str) -> list[str]: ...

    # 데이터셋
    def list_datasets(self) -> list[DatasetInfo]: ...
    def get_dataset(self, dataset_id: int) -> DatasetInfo | None: ...
    def create_active_dataset(
        self, *, name: str, url: str, uploaded_by: str | None, members: Sequence[MemberRecord]
    ) -> DatasetInfo: ...
    def replace_members_and_activate(self, dataset_id: int, members: Sequence[MemberRecord]) -> DatasetInfo: ...
    def delete_dataset(self, dataset_id: int) -> DatasetInfo | None: ...
    def clear_members(self) -> int: ...

    # 업로드 기록
    def record_upload(
        self,
        *,
        user_id: uuid.UUID | None,
        user_email: str | None,
        file_name: str | None,
        records_count: int,
        status: str,
        error_message: str | None = None,
    ) -> None: ...
    def list_uploads(self, limit: int = 50) -> list[UploadHistoryResponse]: ...


def _active_members():
    return (
        select(Member)
        .join(Dataset, Member.dataset_id == Dataset.id)
        .where(Dataset.is_active.is_(True))
    )


def _member_conditions(filters: SearchFilters, today: datetime.date) -> list:
    conds = []
    if filters.query:
        q = filters.query.lower()
        conds.append(
            func.lower(Member.member_number).contains(q, autoescape=True)
            | func.lower(Member.name).contains(q, autoescape=True)
            | func.lower(Member.email).contains(q, autoescape=True)
            | func.lower(Member.first_name).contains(q, autoescape=True)
            | func.lower(Member.last_name).contains(q, autoescape=True)
            | func.lower(Member.school_name).contains(q, autoescape=True)
        )

    # 활성 = 만료일이 오늘보다 뒤
    if filters.status == "active":
        conds.append(Member.expiry_date > today)
    elif filters.status == "expired":
        conds.append(Member.expiry_date <= today)

    if filters.region:
        conds.append(Member.region == filters.region)
    if filters.school:
        conds.append(Member.school_name == filters.school)
    if filters.membership_level:
        conds.append(Member.membership_level == filters.membership_level)
    return conds


def _member_rows(dataset_id: int, members: Iterable[MemberRecord]) -> list[dict]:
    return [{"dataset_id": dataset_id, **m.model_dump()} for m in members]


def _column(column: str):
    try:
        return GROUPABLE_COLUMNS[column]
    except KeyError:
        raise ValueError(f"column must be one of {sorted(GROUPABLE_COLUMNS)}") from None


class SqlRosterStore:
    configured = True

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    # ---------- 읽기 ----------

    def count_members(self) -> int:
        with self._session_factory() as db:
            stmt = select(func.count()).select_from(_active_members().subquery())
            return db.scalar(stmt) or 0

    def find_member(self, member_number: str) -> MemberRecord | None:
        with self._session_factory() as db:
            row = db.scalars(
                _active_members().where(Member.member_number == member_number).order_by(Member.id).limit(1)
            ).first()
            return MemberRecord.model_validate(row) if row else None

    def search_members(
        self, filters: SearchFilters, *, today: datetime.date, offset: int = 0, limit: int | None = None
    ) -> tuple[list[MemberRecord], int]:
        base = _active_members().where(*_member_conditions(filters, today))
        with self._session_factory() as db:
            total = db.scalar(select(func.count()).select_from(base.subquery())) or 0
            stmt = base.order_by(Member.id).offset(offset)
            if limit is not None:
                stmt = stmt.limit(limit)
            rows = db.scalars(stmt).all()
            return [MemberRecord.model_validate(r) for r in rows], total

    def count_expiring(self, *, after: datetime.date, until: datetime.date | None = None) -> int:
        stmt = _active_members().where(Member.expiry_date > after)
        if until is not None:
            stmt = stmt.where(Member.expiry_date <= until)
        with self._session_factory() as db:
            return db.scalar(select(func.count()).select_from(stmt.subquery())) or 0

    def group_count(self, column: str) -> list[tuple[str, int]]:
        col = _column(column)
        stmt = (
            select(col, func.count())
            .select_from(Member)
            .join(Dataset, Member.dataset_id == Dataset.id)
            .where(Dataset.is_active.is_(True))
            .group_by(col)
        )
        with self._session_factory() as db:
            return [(value or "", int(count)) for value, count in db.execute(stmt).all()]

    def distinct_values(self, column: str) -> list[str]:
        col = _column(column)
        stmt = (
            select(col)
            .join(Dataset, Member.dataset_id == Dataset.id)
            .where(Dataset.is_active.is_(True), col != "")
            .distinct()
            .order_by(col)
        )
        with self._session_factory() as db:
            return [v for v in db.scalars(stmt).all() if v]

    # ---------- 데이터셋 ----------

    def list_datasets(self) -> list[DatasetInfo]:
        with self._session_factory() as db:
            rows = db.scalars(select(Dataset).order_by(Dataset.created_at.desc(), Dataset.id.desc())).all()
            return [DatasetInfo.model_validate(r) for r in rows]

    def get_dataset(self, dataset_id: int) -> DatasetInfo | None:
        with self._session_factory() as db:
            row = db.get(Dataset, dataset_id)
            return DatasetInfo.model_validate(row) if row else None

    def _activate(self, db: Session, dataset_id: int) -> None:
        db.execute(update(Dataset).where(Dataset.id != dataset_id).values(is_active=False))
        db.execute(update(Dataset).where(Dataset.id == dataset_id).values(is_active=True))

    """
    새 데이터셋 등록 + 회원 행 삽입 + 나머지 데이터셋 비활성화

    - 하나의 트랜잭션으로 처리 (실패 시 전체 롤백, 기존 활성 데이터셋 유지)

    """
    def create_active_dataset(
        self, *, name: str, url: str, uploaded_by: str | None, members: Sequence[MemberRecord]
    ) -> DatasetInfo:
        with self._session_factory.begin() as db:
            dataset = Dataset(name=name, url=url, row_count=len(members), is_active=False, uploaded_by=uploaded_by)
            db.add(dataset)
            db.flush()

            if members:
                db.execute(insert(Member), _member_rows(dataset.id, members))
            self._activate(db, dataset.id)
            db.flush()
            db.refresh(dataset)
            return DatasetInfo.model_validate(dataset)

    """
    기존 데이터셋 재활성화

    - 해당 데이터셋의 회원 행을 지우고 새로 매핑한 행으로 교체
    - row_count 갱신 후 활성 플래그 전환
    - 모두 하나의 트랜잭션

    """
    def replace_members_and_activate(self, dataset_id: int, members: Sequence[MemberRecord]) -> DatasetInfo:
        with self._session_factory.begin() as db:
            dataset = db.get(Dataset, dataset_id)
            if dataset is None:
                raise DatasetNotFoundError(dataset_id)

            db.execute(delete(Member).where(Member.dataset_id == dataset_id))
            if members:
                db.execute(insert(Member), _member_rows(dataset_id, members))
            dataset.row_count = len(members)
            db.flush()
            self._activate(db, dataset_id)
            db.flush()
            db.refresh(dataset)
            return DatasetInfo.model_validate(dataset)

    def delete_dataset(self, dataset_id: int) -> DatasetInfo | None:
        with self._session_factory.begin() as db:
            dataset = db.get(Dataset, dataset_id)
            if dataset is None:
                return None
            info = DatasetInfo.model_validate(dataset)
            db.execute(delete(Member).where(Member.dataset_id == dataset_id))
            db.delete(dataset)
            return info

    def clear_members(self) -> int:
        with self._session_factory.begin() as db:
            removed = db.execute(delete(Member)).rowcount or 0
            db.execute(update(Dataset).values(is_active=False))
            return removed

    # ---------- 업로드 기록 ----------

    def record_upload(
        self,
        *,
        user_id: uuid.UUID | None,
        user_email: str | None,
        file_name: str | None,
        records_count: int,
        status: str,
        error_message: str | None = None,
    ) -> None:
        with self._session_factory.begin() as db:
            db.add(
                UploadHistory(
                    user_id=user_id,
                    user_email=user_email,
                    file_name=file_name,
                    records_count=records_count,
                    status=status,
                    error_message=error_message,
                )
            )

    def list_uploads(self, limit: int = 50) -> list[UploadHistoryResponse]:
        with self._session_factory() as db:
            rows = db.scalars(
                select(UploadHistory).order_by(UploadHistory.created_at.desc(), UploadHistory.id.desc()).limit(limit)
            ).all()
            return [UploadHistoryResponse.model_validate(r) for r in rows]


class NullRosterStore:
    """DB가 설정되지 않았을 때 사용하는 저장소.

    읽기는 항상 빈 결과, 쓰기는 StorageNotConfiguredError.
    """

    configured = False

    def count_members(self) -> int:
        return 0

    def find_member(self, member_number: str) -> MemberRecord | None:
        return None

    def search_members(self, filters, *, today, offset=0, limit=None):
        return [], 0

    def count_expiring(self, *, after, until=None) -> int:
        return 0

    def group_count(self, column: str) -> list[tuple[str, int]]:
        _column(column)
        return []

    def distinct_values(self, column: str) -> list[str]:
        _column(column)
        return []

    def list_datasets(self) -> list[DatasetInfo]:
        return []

    def get_dataset(self, dataset_id: int) -> DatasetInfo | None:
        return None

    def _not_configured(self, op: str):
        logger.warning("roster store not configured, write rejected op=%s", op)
        raise StorageNotConfiguredError()

    def create_active_dataset(self, *, name, url, uploaded_by, members) -> DatasetInfo:
        self._not_configured("create_active_dataset")

    def replace_members_and_activate(self, dataset_id, members) -> DatasetInfo:
        self._not_configured("replace_members_and_activate")

    def delete_dataset(self, dataset_id: int) -> DatasetInfo | None:
        self._not_configured("delete_dataset")

    def clear_members(self) -> int:
        self._not_configured("clear_members")

    def record_upload(self, **kwargs) -> None:
        # 기록할 곳이 없음
        return None

    def list_uploads(self, limit: int = 50) -> list[UploadHistoryResponse]:
        return []


def create_roster_store(session_factory: sessionmaker | None) -> RosterStore:
    if session_factory is None:
        logger.warning("DATABASE_URL is not set; roster store runs in not-configured mode")
        return NullRosterStore()
    return SqlRosterStore(session_factory)
