"""
members.py

관리자 회원 조회 API.

현재 활성 데이터셋의 회원을 조회 / 검색 / 통계 / 내보내기 하는 엔드포인트.
활성 데이터셋이 없으면 오류 대신 빈 결과를 돌려준다.

관련 파일:
- app.services.members   : 조회 로직
- app.db.roster_store    : 명단 저장소

"""

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse

from app.core.deps import get_current_admin, get_roster_store
from app.db.roster_store import RosterStore
from app.models.user import User
from app.schemas.member import MemberStatusFilter, SearchFilters
from app.services import members as member_service
from app.services.roster_mapper import processing_date

router = APIRouter(prefix="/admin", tags=["admin-members"])


# 검색 / 내보내기 공통 필터 (쿼리 파라미터)
def search_filters(
    query: str | None = None,
    status: MemberStatusFilter = "all",
    region: str | None = None,
    school: str | None = None,
    membership_level: str | None = None,
) -> SearchFilters:
    return SearchFilters(
        query=query,
        status=status,
        region=region,
        school=school,
        membership_level=membership_level,
    )


@router.get("/members/count")
def count_members(
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    return {"data": {"count": store.count_members()}}


@router.get("/members/search")
def search_members(
    page: int = Query(1, ge=1),
    page_size: int | None = Query(None, ge=1, le=member_service.MAX_PAGE_SIZE),
    filters: SearchFilters = Depends(search_filters),
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    result = member_service.search_members(store, filters, page=page, page_size=page_size)
    return {"data": result.model_dump(mode="json")}


# 검색 화면 드롭다운용 선택지
@router.get("/members/filters")
def filter_options(
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    return {"data": member_service.get_filter_options(store).model_dump(mode="json")}


"""
회원 목록 CSV 내보내기

- 검색과 같은 필터 적용
- 파일명: members-export-YYYY-MM-DD.csv

"""

@router.get("/members/export")
def export_members(
    filters: SearchFilters = Depends(search_filters),
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    today = processing_date()
    members = member_service.export_members(store, filters, today=today)

    filename = f"members-export-{today.isoformat()}.csv"
    return StreamingResponse(
        member_service.iter_members_csv(members, today=today),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/members/{member_number}")
def lookup_member(
    member_number: str,
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    result = member_service.lookup_member(store, member_number)
    return {"data": result.model_dump(mode="json")}


@router.get("/analytics")
def analytics(
    store: RosterStore = Depends(get_roster_store),
    _: User = Depends(get_current_admin),
):
    return {"data": member_service.get_analytics(store).model_dump(mode="json")}
