"""
services/roster_parser.py

업로드된 명단 파일(CSV / Excel)을 (headers, rows) 표 형태로 읽어오는 파서 모음.

처리 흐름:
- 파일 이름 확장자로 형식 판별 (.xlsx / .xls → 스프레드시트, 그 외 → CSV)
- CSV: 줄 단위 분리 → 빈 줄 제거 → BOM 제거 → 쉼표 분리 → 셀 정리(clean_cell)
- 스프레드시트: 첫 번째 시트만, 첫 행을 헤더로, 모든 셀을 문자열 + trim

설계 원칙:
- 내용 행이 0개인 파일은 예외가 아닌 "빈 결과"로 반환
- 디코딩/읽기 실패만 RosterFileError로 올림
- 행 길이는 헤더 길이와 달라도 됨 (부족한 셀은 매핑 단계에서 빈 문자열)

NOTE:
- CSV 분리는 따옴표 안의 쉼표를 지원하지 않는다.
  (따옴표 안 쉼표가 있는 파일은 열이 밀린다)

관련 파일:
- app.services.roster_mapper : 헤더 검증 / 행 → MemberRecord 변환
- app.services.datasets      : 업로드/활성화 파이프라인 조립

"""

import datetime
import io
import re
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

import xlrd
from openpyxl import load_workbook

from app.core.exceptions import RosterFileError


SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")

_LINE_SPLIT_RE = re.compile(r"\r?\n")
_KEEP_AS_TEXT_RE = re.compile(r'^="(.*)"$', re.DOTALL)
_SCIENTIFIC_RE = re.compile(r"^\d+(\.\d+)?e\+\d+$", re.IGNORECASE)


@dataclass
class ParsedTable:
    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.rows


"""
셀 값 정리 함수 (CSV 경로 전용)

순서대로 적용:
1. 앞뒤 공백 제거
2. ="..." (엑셀 "텍스트로 유지" 래퍼) 벗기기
3. 바깥 큰따옴표 한 쌍 제거
4. "" → " 치환 후 다시 trim
5. 1.23e+5 같은 지수 표기면 반올림한 정수 문자열로 변환

"""

def clean_cell(value) -> str:
    if value is None:
        return ""
    value = str(value).strip()

    m = _KEEP_AS_TEXT_RE.match(value)
    if m:
        value = m.group(1)

    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]

    value = value.replace('""', '"').strip()

    if _SCIENTIFIC_RE.match(value):
        return _expand_scientific(value)

    return value


def _expand_scientific(value: str) -> str:
    # 회원번호/전화번호 같은 숫자 ID 열이 스프레드시트에서 지수 표기로 바뀐 경우 복원
    try:
        number = Decimal(value).to_integral_value(rounding=ROUND_HALF_UP)
        return str(int(number))
    except (InvalidOperation, ValueError, OverflowError):
        return value


def is_spreadsheet(filename: str) -> bool:
    return (filename or "").lower().endswith(SPREADSHEET_EXTENSIONS)


def parse_csv(text: str) -> ParsedTable:
    lines = [line for line in _LINE_SPLIT_RE.split(text) if line.strip() != ""]
    if not lines:
        return ParsedTable()

    first = lines[0]
    if first.startswith("\ufeff"):
        first = first[1:]

    headers = [clean_cell(h) for h in first.split(",")]
    rows = [[clean_cell(v) for v in line.split(",")] for line in lines[1:]]
    return ParsedTable(headers=headers, rows=rows)


def _cell_to_str(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime.datetime):
        if value.time() == datetime.time(0, 0):
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value).strip()


def _table_from_sheet_rows(sheet_rows) -> ParsedTable:
    cleaned = []
    for raw in sheet_rows:
        row = [_cell_to_str(v) for v in raw]
        # 완전히 빈 행은 건너뜀 (CSV 경로의 빈 줄 제거와 동일)
        if any(cell != "" for cell in row):
            cleaned.append(row)

    if not cleaned:
        return ParsedTable()
    return ParsedTable(headers=cleaned[0], rows=cleaned[1:])


def _read_xlsx(data: bytes) -> ParsedTable:
    wb = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    try:
        if not wb.worksheets:
            return ParsedTable()
        ws = wb.worksheets[0]
        return _table_from_sheet_rows(ws.iter_rows(values_only=True))
    finally:
        wb.close()


def _read_xls(data: bytes) -> ParsedTable:
    book = xlrd.open_workbook(file_contents=data)
    if book.nsheets == 0:
        return ParsedTable()
    sheet = book.sheet_by_index(0)

    def _rows():
        for r in range(sheet.nrows):
            values = []
            for cell in sheet.row(r):
                if cell.ctype == xlrd.XL_CELL_DATE:
                    values.append(xlrd.xldate.xldate_as_datetime(cell.value, book.datemode))
                elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                    values.append(bool(cell.value))
                else:
                    values.append(cell.value)
            yield values

    return _table_from_sheet_rows(_rows())


def parse_excel(data: bytes, filename: str) -> ParsedTable:
    try:
        if filename.lower().endswith(".xls"):
            return _read_xls(data)
        return _read_xlsx(data)
    except Exception as e:
        raise RosterFileError(f"Could not read spreadsheet: {e}") from e


"""
업로드 파일 파싱 진입점

- filename은 형식 판별에만 사용
- CSV는 UTF-8로 디코딩 (실패 시 RosterFileError)

"""

def parse_roster_file(data: bytes, filename: str) -> ParsedTable:
    if is_spreadsheet(filename):
        return parse_excel(data, filename)

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise RosterFileError(f"File is not valid UTF-8 text: {e.reason}") from e
    return parse_csv(text)
