"""
명단 파서 단위 테스트.
- 셀 정리(clean_cell) 규칙, CSV 줄/BOM 처리, xlsx / xls 읽기, 읽기 실패 처리
"""

import io
from pathlib import Path

import pytest
from openpyxl import Workbook

from app.core.exceptions import RosterFileError
from app.services.roster_parser import clean_cell, is_spreadsheet, parse_csv, parse_roster_file


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('="00123"', "00123"),
        ('"Smith"', "Smith"),
        ('"say ""hi"""', 'say "hi"'),
        ('"Jane ""JJ"" Smith"', 'Jane "JJ" Smith'),
        ("1.23E+5", "123000"),
        ("4.5e+7", "45000000"),
        ("  plain  ", "plain"),
        ("", ""),
        (None, ""),
    ],
)
def test_clean_cell(raw, expected):
    assert clean_cell(raw) == expected


def test_clean_cell_rounds_half_up():
    assert clean_cell("1.5e+0") == "2"
    assert clean_cell("2.5e+0") == "3"


def test_clean_cell_keeps_large_ids_exact():
    assert clean_cell("9.87654321012e+11") == "987654321012"


def test_parse_csv_strips_bom_and_blank_lines():
    text = "\ufeffMember Number,First Name\r\n\r\n111,Ann\n   \n222,Bob\n"
    table = parse_csv(text)

    assert table.headers == ["Member Number", "First Name"]
    assert table.rows == [["111", "Ann"], ["222", "Bob"]]


def test_parse_csv_header_only_is_empty():
    table = parse_csv("Member Number,First Name\n")
    assert table.headers == ["Member Number", "First Name"]
    assert table.is_empty


def test_parse_csv_empty_text():
    table = parse_csv("")
    assert table.headers == []
    assert table.is_empty


def test_parse_csv_allows_ragged_rows():
    table = parse_csv("A,B,C\n1\n1,2,3,4\n")
    assert table.rows == [["1"], ["1", "2", "3", "4"]]


def test_is_spreadsheet():
    assert is_spreadsheet("members.XLSX")
    assert is_spreadsheet("old.xls")
    assert not is_spreadsheet("members.csv")
    assert not is_spreadsheet("")


def _xlsx_bytes(rows) -> bytes:
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(row)
    buf = io.BytesIO()
    wb.save(buf)
    return buf.getvalue()


def test_parse_xlsx_first_sheet_as_strings():
    data = _xlsx_bytes(
        [
            ["Member Number", "First Name", "Renew Year"],
            [90012345, "  Ann  ", 2024],
            [None, None, None],
            ["777", "Bob", None],
        ]
    )
    table = parse_roster_file(data, "members.xlsx")

    assert table.headers == ["Member Number", "First Name", "Renew Year"]
    assert table.rows == [["90012345", "Ann", "2024"], ["777", "Bob", ""]]


def test_parse_xlsx_header_only_is_empty():
    data = _xlsx_bytes([["Member Number", "First Name"]])
    assert parse_roster_file(data, "members.xlsx").is_empty


def test_unreadable_spreadsheet_raises():
    with pytest.raises(RosterFileError):
        parse_roster_file(b"definitely not a workbook", "members.xlsx")


# 레거시 BIFF8 워크북: 헤더 3개 + 숫자 ID(45000000.0) / 연도(2024.0) / 공백 섞인 이름
LEGACY_XLS = Path(__file__).parent / "fixtures" / "legacy_roster.xls"


@pytest.mark.parametrize("filename", ["members.xls", "MEMBERS.XLS"])
def test_parse_legacy_xls(filename):
    table = parse_roster_file(LEGACY_XLS.read_bytes(), filename)

    assert table.headers == ["Member Number", "Renew Year", "First Name"]
    assert table.rows == [["45000000", "2024", "Jane"]]


def test_unreadable_xls_raises():
    with pytest.raises(RosterFileError):
        parse_roster_file(b"definitely not a workbook", "members.xls")


def test_non_utf8_csv_raises():
    with pytest.raises(RosterFileError):
        parse_roster_file(b"\xff\xfe\x00bad", "members.csv")
