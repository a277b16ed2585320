"""
services/roster_mapper.py

명단 파일의 헤더 검증 및 행(row) → MemberRecord 변환 로직.

주요 기능:
- 필수 헤더 집합 검증 (열 순서 무관, 누락된 열 목록을 그대로 보고)
- 헤더 이름 → MemberRecord 필드 매핑 표(COLUMN_FIELDS) 관리
- Renew Year 기반 만료일 계산 (다음 해 2월 27일)

설계 원칙:
- 헤더 매핑은 코드 곳곳의 문자열 조회가 아닌 하나의 데이터 표로 관리
- 매핑 표는 import 시점에 한 번 MemberRecord 필드와 대조하여 검증
- 셀이 없거나 비어 있으면 항상 빈 문자열 (예외 없음)

관련 파일:
- app.services.roster_parser : 파일 → (headers, rows)
- app.schemas.member         : MemberRecord 값 타입

"""

import datetime
import re
from typing import Iterable, Sequence

from app.core.exceptions import MissingHeadersError
from app.schemas.member import MemberRecord


# 업로드 파일이 반드시 포함해야 하는 열 (업로드 조직과의 호환 계약)
REQUIRED_HEADERS: tuple[str, ...] = (
    "Region",
    "Section",
    "School Section",
    "School Name",
    "Member Number",
    "First Name",
    "Middle Name",
    "Last Name",
    "Email Address",
    "Grade",
    "Gender",
    "IEEE Status",
    "Renew Year",
    "Active Society List",
    "Technical Community List",
    "Technical Council List",
    "Special Interest Group List",
)

# 파일 버전에 따라 있을 수도, 없을 수도 있는 열
OPTIONAL_HEADERS: tuple[str, ...] = (
    "School Number",
    "Home Number",
)

# 헤더 이름 → MemberRecord 필드
COLUMN_FIELDS: dict[str, str] = {
    "Member Number": "member_number",
    "First Name": "first_name",
    "Middle Name": "middle_name",
    "Last Name": "last_name",
    "Email Address": "email",
    "Home Number": "home_number",
    "IEEE Status": "membership_level",
    "Renew Year": "renew_year",
    "Region": "region",
    "Section": "section",
    "School Section": "school_section",
    "School Name": "school_name",
    "School Number": "school_number",
    "Grade": "grade",
    "Gender": "gender",
    "Active Society List": "active_society_list",
    "Technical Community List": "technical_community_list",
    "Technical Council List": "technical_council_list",
    "Special Interest Group List": "special_interest_group_list",
}

# 만료일 = (Renew Year + 1)년 2월 27일
EXPIRY_MONTH = 2
EXPIRY_DAY = 27

_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")


def _check_column_fields() -> None:
    fields = set(MemberRecord.model_fields)
    unmapped = [h for h in REQUIRED_HEADERS + OPTIONAL_HEADERS if h not in COLUMN_FIELDS]
    unknown = [f for f in COLUMN_FIELDS.values() if f not in fields]
    if unmapped or unknown:
        raise RuntimeError(f"Invalid roster column mapping: unmapped={unmapped} unknown_fields={unknown}")


_check_column_fields()


def find_missing_headers(headers: Iterable[str]) -> list[str]:
    present = set(headers)
    return [h for h in REQUIRED_HEADERS if h not in present]


def validate_headers(headers: Iterable[str]) -> None:
    missing = find_missing_headers(headers)
    if missing:
        raise MissingHeadersError(missing)


def build_header_index(headers: Sequence[str]) -> dict[str, int]:
    # 같은 이름의 열이 여러 번 나오면 마지막 열이 이김
    return {h: i for i, h in enumerate(headers)}


"""
만료일 계산

- Renew Year 앞부분이 정수로 읽히면 (year + 1)년 2월 27일
- 비어 있거나 읽을 수 없으면 처리일(today)로 대체
- 달력 범위를 벗어난 연도도 today로 대체

"""

def compute_expiry_date(renew_year: str, today: datetime.date) -> datetime.date:
    m = _LEADING_INT_RE.match(renew_year or "")
    if not m:
        return today
    try:
        return datetime.date(int(m.group(1)) + 1, EXPIRY_MONTH, EXPIRY_DAY)
    except ValueError:
        return today


def processing_date() -> datetime.date:
    return datetime.datetime.now(datetime.timezone.utc).date()


def row_to_member(
    values: Sequence[str],
    header_index: dict[str, int],
    today: datetime.date | None = None,
) -> MemberRecord:
    today = today or processing_date()

    def get_value(header: str) -> str:
        idx = header_index.get(header)
        if idx is None or idx >= len(values):
            return ""
        return values[idx] or ""

    data = {field: get_value(header) for header, field in COLUMN_FIELDS.items()}
    data["name"] = f"{data['first_name']} {data['last_name']}".strip()
    data["expiry_date"] = compute_expiry_date(data["renew_year"], today)
    return MemberRecord(**data)


def map_rows(
    headers: Sequence[str],
    rows: Iterable[Sequence[str]],
    today: datetime.date | None = None,
) -> list[MemberRecord]:
    today = today or processing_date()
    index = build_header_index(headers)
    return [row_to_member(row, index, today) for row in rows]
