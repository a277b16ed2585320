import datetime
from typing import Literal, Optional, List

from pydantic import BaseModel, ConfigDict, Field


class MemberRecord(BaseModel):
    """명단 한 행을 나타내는 값 타입.

    파이프라인(Row Mapper)의 출력이자 저장소 조회 결과의 공통 형태.
    home_number / school_number 는 파일 버전에 따라 없을 수 있어 빈 문자열 허용.
    """

    member_number: str
    name: str = ""
    first_name: str = ""
    middle_name: str = ""
    last_name: str = ""
    email: str = ""
    home_number: str = ""

    membership_level: str = ""
    renew_year: str = ""
    expiry_date: datetime.date

    region: str = ""
    section: str = ""
    school_section: str = ""
    school_name: str = ""
    school_number: str = ""
    grade: str = ""
    gender: str = ""

    active_society_list: str = ""
    technical_community_list: str = ""
    technical_council_list: str = ""
    special_interest_group_list: str = ""

    model_config = ConfigDict(from_attributes=True, frozen=True)


class ValidateRequest(BaseModel):
    membership_id: str = ""


class ValidatedMember(BaseModel):
    name: str
    expiry_date: datetime.date
    home_number: str = ""
    membership_level: str = ""
    is_active: bool


class ValidationResult(BaseModel):
    status: Literal["valid", "invalid", "error"]
    member: Optional[ValidatedMember] = None
    message: Optional[str] = None


class LookupResult(BaseModel):
    status: Literal["found", "not_found", "error"]
    member: Optional[MemberRecord] = None
    message: Optional[str] = None


MemberStatusFilter = Literal["all", "active", "expired"]


class SearchFilters(BaseModel):
    query: Optional[str] = None
    status: MemberStatusFilter = "all"
    region: Optional[str] = None
    school: Optional[str] = None
    membership_level: Optional[str] = None


class SearchResult(BaseModel):
    members: List[MemberRecord]
    total: int
    page: int
    page_size: int
    total_pages: int


class FilterOptions(BaseModel):
    regions: List[str] = Field(default_factory=list)
    schools: List[str] = Field(default_factory=list)
    membership_levels: List[str] = Field(default_factory=list)


class CountBucket(BaseModel):
    label: str
    count: int


class AnalyticsData(BaseModel):
    total_members: int = 0
    active_members: int = 0
    expired_members: int = 0
    expiring_soon: int = 0
    members_by_region: List[CountBucket] = Field(default_factory=list)
    members_by_school: List[CountBucket] = Field(default_factory=list)
    members_by_level: List[CountBucket] = Field(default_factory=list)
    members_by_status: List[CountBucket] = Field(default_factory=list)
