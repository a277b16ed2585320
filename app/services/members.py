"""
services/members.py

회원 명단 조회 계열 비즈니스 로직 모음.

모든 함수는 저장소(RosterStore)를 인자로 받아
"현재 활성 데이터셋"만을 대상으로 동작한다.
활성 데이터셋이 없으면 오류가 아닌 빈 결과 / not_found 상태를 돌려준다.

주요 기능:
- 공개 회원 검증 (valid / invalid / error)
- 관리자 회원 상세 조회 (found / not_found / error)
- 검색 + 필터 + 페이지네이션
- 필터 선택지 (지역 / 학교 / 등급)
- 통계 (활성 / 만료 / 만료 임박 / 지역·학교·등급별 집계)
- CSV 내보내기

설계 원칙:
- 활성 여부는 "만료일 > 오늘" 하나의 규칙으로만 판단
- today는 인자로 받아 테스트에서 고정 가능

관련 파일:
- app.db.roster_store    : 저장소
- app.routers.members    : 관리자 조회 API
- app.routers.public     : 공개 / 봉사자 검증 API

"""

import csv
import datetime
import io
import math
from typing import Iterable, Iterator

from app.core.config import settings
from app.db.roster_store import RosterStore
from app.schemas.member import (
    AnalyticsData,
    CountBucket,
    FilterOptions,
    LookupResult,
    MemberRecord,
    SearchFilters,
    SearchResult,
    ValidatedMember,
    ValidationResult,
)
from app.services.roster_mapper import processing_date


UNKNOWN_LABEL = "Unknown"
TOP_N = 10
MAX_PAGE_SIZE = 100

# 내보내기 열 순서 (고정)
EXPORT_HEADERS = [
    "Member Number", "First Name", "Middle Name", "Last Name", "Email Address",
    "IEEE Status", "Expiry Date", "Status",
    "Region", "Section", "School Section", "School Name",
    "Grade", "Gender", "Renew Year",
]


def is_active_membership(expiry_date: datetime.date | None, today: datetime.date) -> bool:
    if expiry_date is None:
        return False
    return expiry_date > today


def _clean_id(membership_id: str | None) -> str:
    return (membership_id or "").strip()


"""
공개 회원 검증

- 활성 데이터셋에 회원이 없으면 invalid (업로드 안내 메시지)
- ID가 비어 있으면 error
- 찾으면 이름 / 만료일 / 집 전화 / 등급 / 활성 여부만 노출

"""

def validate_membership(
    store: RosterStore,
    membership_id: str | None,
    today: datetime.date | None = None,
) -> ValidationResult:
    today = today or processing_date()

    if store.count_members() == 0:
        return ValidationResult(
            status="invalid",
            message="No member data has been uploaded. Please ask an admin to upload a dataset.",
        )

    member_id = _clean_id(membership_id)
    if not member_id:
        return ValidationResult(status="error", message="Membership ID must not be empty.")

    member = store.find_member(member_id)
    if member is None:
        return ValidationResult(
            status="invalid",
            message=f'Membership ID "{member_id}" not found in the database.',
        )

    return ValidationResult(
        status="valid",
        member=ValidatedMember(
            name=member.name,
            expiry_date=member.expiry_date,
            home_number=member.home_number,
            membership_level=member.membership_level,
            is_active=is_active_membership(member.expiry_date, today),
        ),
    )


def lookup_member(store: RosterStore, membership_id: str | None) -> LookupResult:
    if store.count_members() == 0:
        return LookupResult(
            status="not_found",
            message="No dataset uploaded. Please upload a member CSV/Excel file to begin.",
        )

    member_id = _clean_id(membership_id)
    if not member_id:
        return LookupResult(status="error", message="Membership ID must not be empty.")

    member = store.find_member(member_id)
    if member is None:
        return LookupResult(status="not_found", message="Membership ID not found.")
    return LookupResult(status="found", member=member)


def search_members(
    store: RosterStore,
    filters: SearchFilters,
    page: int = 1,
    page_size: int | None = None,
    today: datetime.date | None = None,
) -> SearchResult:
    today = today or processing_date()
    page = max(page, 1)
    page_size = min(max(page_size or settings.SEARCH_PAGE_SIZE, 1), MAX_PAGE_SIZE)

    members, total = store.search_members(
        filters, today=today, offset=(page - 1) * page_size, limit=page_size
    )
    return SearchResult(
        members=members,
        total=total,
        page=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size),
    )


def get_filter_options(store: RosterStore) -> FilterOptions:
    return FilterOptions(
        regions=store.distinct_values("region"),
        schools=store.distinct_values("school_name"),
        membership_levels=store.distinct_values("membership_level"),
    )


def _buckets(pairs: Iterable[tuple[str, int]], limit: int | None = None) -> list[CountBucket]:
    merged: dict[str, int] = {}
    for value, count in pairs:
        label = value or UNKNOWN_LABEL
        merged[label] = merged.get(label, 0) + count

    ordered = sorted(merged.items(), key=lambda kv: (-kv[1], kv[0]))
    if limit is not None:
        ordered = ordered[:limit]
    return [CountBucket(label=label, count=count) for label, count in ordered]


"""
통계 데이터 계산

- 활성: 만료일 > 오늘 / 만료: 나머지
- 만료 임박: 오늘 < 만료일 <= 오늘 + EXPIRING_SOON_DAYS
- 지역 / 학교는 상위 10개, 등급은 전체
- 빈 값은 "Unknown"으로 집계

"""

def get_analytics(
    store: RosterStore,
    today: datetime.date | None = None,
    expiring_soon_days: int | None = None,
) -> AnalyticsData:
    today = today or processing_date()
    days = settings.EXPIRING_SOON_DAYS if expiring_soon_days is None else expiring_soon_days

    total = store.count_members()
    active = store.count_expiring(after=today)
    soon = store.count_expiring(after=today, until=today + datetime.timedelta(days=days))
    expired = total - active

    return AnalyticsData(
        total_members=total,
        active_members=active,
        expired_members=expired,
        expiring_soon=soon,
        members_by_region=_buckets(store.group_count("region"), TOP_N),
        members_by_school=_buckets(store.group_count("school_name"), TOP_N),
        members_by_level=_buckets(store.group_count("membership_level")),
        members_by_status=[
            CountBucket(label="Active", count=active),
            CountBucket(label="Expired", count=expired),
        ],
    )


def export_members(
    store: RosterStore,
    filters: SearchFilters | None = None,
    today: datetime.date | None = None,
) -> list[MemberRecord]:
    today = today or processing_date()
    members, _ = store.search_members(filters or SearchFilters(), today=today)
    return members


def _export_row(m: MemberRecord, today: datetime.date) -> list[str]:
    return [
        m.member_number,
        m.first_name,
        m.middle_name,
        m.last_name,
        m.email,
        m.membership_level,
        m.expiry_date.isoformat(),
        "Active" if is_active_membership(m.expiry_date, today) else "Expired",
        m.region,
        m.section,
        m.school_section,
        m.school_name,
        m.grade,
        m.gender,
        m.renew_year,
    ]


"""
회원 목록 CSV 생성기

- 모든 필드를 큰따옴표로 감싸고 내부 큰따옴표는 두 번 씀 (QUOTE_ALL)
- StreamingResponse에 바로 넘길 수 있도록 한 줄씩 yield

"""

def iter_members_csv(members: Iterable[MemberRecord], today: datetime.date | None = None) -> Iterator[str]:
    today = today or processing_date()
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator="\n")

    writer.writerow(EXPORT_HEADERS)
    yield output.getvalue()
    output.seek(0)
    output.truncate(0)

    for m in members:
        writer.writerow(_export_row(m, today))
        yield output.getvalue()
        output.seek(0)
        output.truncate(0)
