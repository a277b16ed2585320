"""
헤더 검증 / 행 매핑 단위 테스트.
"""

import datetime
import random

import pytest

from app.core.exceptions import MissingHeadersError
from app.services.roster_mapper import (
    OPTIONAL_HEADERS,
    REQUIRED_HEADERS,
    compute_expiry_date,
    find_missing_headers,
    map_rows,
    validate_headers,
)

TODAY = datetime.date(2025, 6, 1)


def test_headers_accepted_in_any_order():
    headers = list(REQUIRED_HEADERS)
    random.Random(7).shuffle(headers)
    assert find_missing_headers(headers) == []
    validate_headers(headers)


def test_extra_and_optional_headers_are_fine():
    headers = ["Unrelated"] + list(REQUIRED_HEADERS) + list(OPTIONAL_HEADERS)
    assert find_missing_headers(headers) == []


def test_missing_headers_reported_exactly():
    headers = [h for h in REQUIRED_HEADERS if h not in ("Gender", "Renew Year")]
    assert find_missing_headers(headers) == ["Gender", "Renew Year"]

    with pytest.raises(MissingHeadersError) as exc:
        validate_headers(headers)
    assert exc.value.missing == ["Gender", "Renew Year"]
    assert "Invalid file headers. Missing: Gender, Renew Year" in str(exc.value)


def test_optional_headers_never_required():
    missing = find_missing_headers([])
    assert set(missing) == set(REQUIRED_HEADERS)
    assert not set(OPTIONAL_HEADERS) & set(missing)


@pytest.mark.parametrize(
    "renew_year, expected",
    [
        ("2024", datetime.date(2025, 2, 27)),
        ("2024.0", datetime.date(2025, 2, 27)),
        (" 2030", datetime.date(2031, 2, 27)),
        ("", TODAY),
        ("abc", TODAY),
        ("99999", TODAY),
    ],
)
def test_compute_expiry_date(renew_year, expected):
    assert compute_expiry_date(renew_year, TODAY) == expected


def test_map_rows_uses_header_names_not_positions():
    headers = ["Last Name", "Member Number", "Renew Year", "First Name", "Home Number"]
    rows = [["Kim", "123", "2024", "Ann", "555-1234"]]

    [member] = map_rows(headers, rows, TODAY)

    assert member.member_number == "123"
    assert member.first_name == "Ann"
    assert member.last_name == "Kim"
    assert member.name == "Ann Kim"
    assert member.home_number == "555-1234"
    assert member.expiry_date == datetime.date(2025, 2, 27)


def test_short_rows_fill_with_empty_strings():
    headers = list(REQUIRED_HEADERS)
    [member] = map_rows(headers, [["R10"]], TODAY)

    assert member.region == "R10"
    assert member.member_number == ""
    assert member.email == ""
    assert member.home_number == ""
    assert member.expiry_date == TODAY


def test_name_is_trimmed_when_one_part_missing():
    [member] = map_rows(["First Name", "Last Name"], [["", "Lee"]], TODAY)
    assert member.name == "Lee"
