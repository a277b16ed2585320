"""
회원 조회 API 통합 테스트.
- 공개 검증 / 봉사자 검증 / 관리자 상세 조회 / 검색 / 필터 / 통계 / CSV 내보내기
"""

import csv
import datetime
import io

from sqlalchemy import select

from app.models.activity_log import ActivityLog, ActivityAction
from app.models.user import Role
from app.services import members as member_svc
from app.services.datasets import upload_roster

from tests.helpers import (
    admin_headers,
    auth_header,
    member_row,
    roster_csv,
    setup_user_with_role,
    upload_csv,
)

ACTIVE_YEAR = "2099"
EXPIRED_YEAR = "2000"


def _seed(client, headers):
    rows = [
        member_row("1001", "Ann", "Kim", ACTIVE_YEAR, extra={"Region": "R10", "School Name": "Alpha Univ", "Home Number": "555-0001"}),
        member_row("1002", "Bob", "Lee", EXPIRED_YEAR, extra={"Region": "R10", "School Name": "Beta Univ"}),
        member_row("1003", "Cara", "Park", ACTIVE_YEAR, extra={"Region": "R8", "School Name": "Alpha Univ", "IEEE Status": "Student"}),
        member_row("1004", "Dan", "Choi", ACTIVE_YEAR, extra={"Region": "", "School Name": ""}),
    ]
    cols = list(member_row("x", "x", "x").keys()) + [
        "Middle Name", "School Section", "Grade", "Gender", "Home Number",
        "Active Society List", "Technical Community List", "Technical Council List", "Special Interest Group List",
    ]
    r = upload_csv(client, headers, roster_csv(rows, headers=cols))
    assert r.status_code == 200, r.text


def test_public_validate_before_any_upload(client):
    r = client.post("/validate", json={"membership_id": "1001"})
    assert r.status_code == 200
    body = r.json()["data"]
    assert body["status"] == "invalid"
    assert body["message"] == "No member data has been uploaded. Please ask an admin to upload a dataset."


def test_public_validate(client, db_session):
    _seed(client, admin_headers(client, db_session))

    ok = client.post("/validate", json={"membership_id": " 1001 "}).json()["data"]
    assert ok["status"] == "valid"
    assert ok["member"] == {
        "name": "Ann Kim",
        "expiry_date": "2100-02-27",
        "home_number": "555-0001",
        "membership_level": "Member",
        "is_active": True,
    }

    expired = client.post("/validate", json={"membership_id": "1002"}).json()["data"]
    assert expired["status"] == "valid"
    assert expired["member"]["is_active"] is False

    missing = client.post("/validate", json={"membership_id": "9999"}).json()["data"]
    assert missing["status"] == "invalid"
    assert missing["message"] == 'Membership ID "9999" not found in the database.'

    blank = client.post("/validate", json={"membership_id": "   "}).json()["data"]
    assert blank["status"] == "error"


def test_volunteer_validate_is_logged(client, db_session):
    _seed(client, admin_headers(client, db_session))

    assert client.post("/volunteer/validate", json={"membership_id": "1001"}).status_code == 401

    user = setup_user_with_role(client, db_session, Role.USER)
    r = client.post("/volunteer/validate", json={"membership_id": "1001"}, headers=auth_header(user["token"]))
    assert r.status_code == 403

    volunteer = setup_user_with_role(client, db_session, Role.VOLUNTEER)
    r = client.post("/volunteer/validate", json={"membership_id": "1001"}, headers=auth_header(volunteer["token"]))
    assert r.status_code == 200
    assert r.json()["data"]["status"] == "valid"

    db_session.expire_all()
    logs = db_session.scalars(select(ActivityLog).where(ActivityLog.action == ActivityAction.VALIDATE_MEMBER)).all()
    assert len(logs) == 1
    assert logs[0].actor_email == volunteer["email"]
    assert logs[0].details == "1001 -> valid"


def test_admin_lookup(client, db_session):
    headers = admin_headers(client, db_session)

    empty = client.get("/admin/members/1001", headers=headers).json()["data"]
    assert empty["status"] == "not_found"
    assert empty["message"] == "No dataset uploaded. Please upload a member CSV/Excel file to begin."

    _seed(client, headers)

    found = client.get("/admin/members/1003", headers=headers).json()["data"]
    assert found["status"] == "found"
    assert found["member"]["email"] == "cara@example.com"
    assert found["member"]["membership_level"] == "Student"

    missing = client.get("/admin/members/nope", headers=headers).json()["data"]
    assert missing == {"status": "not_found", "member": None, "message": "Membership ID not found."}


def test_search_filters_and_pagination(client, db_session):
    headers = admin_headers(client, db_session)
    _seed(client, headers)

    def search(**params):
        r = client.get("/admin/members/search", params=params, headers=headers)
        assert r.status_code == 200, r.text
        return r.json()["data"]

    everything = search()
    assert everything["total"] == 4
    assert everything["total_pages"] == 1

    assert [m["member_number"] for m in search(query="ALPHA")["members"]] == ["1001", "1003"]
    assert [m["member_number"] for m in search(query="bob@")["members"]] == ["1002"]
    assert [m["member_number"] for m in search(status="expired")["members"]] == ["1002"]
    assert search(status="active")["total"] == 3
    assert [m["member_number"] for m in search(region="R8")["members"]] == ["1003"]
    assert [m["member_number"] for m in search(membership_level="Student")["members"]] == ["1003"]
    assert search(school="Alpha Univ", status="active")["total"] == 2
    assert search(query="100%")["total"] == 0

    page2 = search(page=2, page_size=3)
    assert page2["total"] == 4
    assert page2["total_pages"] == 2
    assert [m["member_number"] for m in page2["members"]] == ["1004"]

    bad = client.get("/admin/members/search", params={"status": "weird"}, headers=headers)
    assert bad.status_code == 422


def test_filter_options(client, db_session):
    headers = admin_headers(client, db_session)
    _seed(client, headers)

    data = client.get("/admin/members/filters", headers=headers).json()["data"]
    assert data == {
        "regions": ["R10", "R8"],
        "schools": ["Alpha Univ", "Beta Univ"],
        "membership_levels": ["Member", "Student"],
    }


def test_analytics(client, db_session):
    headers = admin_headers(client, db_session)
    _seed(client, headers)

    data = client.get("/admin/analytics", headers=headers).json()["data"]
    assert data["total_members"] == 4
    assert data["active_members"] == 3
    assert data["expired_members"] == 1
    assert data["members_by_region"] == [
        {"label": "R10", "count": 2},
        {"label": "R8", "count": 1},
        {"label": "Unknown", "count": 1},
    ]
    assert data["members_by_school"][0] == {"label": "Alpha Univ", "count": 2}
    assert data["members_by_status"] == [
        {"label": "Active", "count": 3},
        {"label": "Expired", "count": 1},
    ]


def test_expiring_soon_counts_window(roster_store, blob_store):
    today = datetime.date(2025, 2, 10)
    data = roster_csv(
        [
            member_row("1", "A", "B", "2024"),   # 2025-02-27, 17일 남음
            member_row("2", "C", "D", "2025"),   # 2026-02-27
            member_row("3", "E", "F", "2023"),   # 2024-02-27, 만료
        ]
    )
    upload_roster(roster_store, blob_store, data=data, filename="m.csv", today=today)

    analytics = member_svc.get_analytics(roster_store, today=today)
    assert analytics.active_members == 2
    assert analytics.expired_members == 1
    assert analytics.expiring_soon == 1

    assert member_svc.get_analytics(roster_store, today=today, expiring_soon_days=10).expiring_soon == 0


def test_export_csv(client, db_session):
    headers = admin_headers(client, db_session)
    rows = [
        member_row("1001", "Ann", 'O"Neil', ACTIVE_YEAR),
        member_row("1002", "Bob", "Lee", EXPIRED_YEAR),
    ]
    upload_csv(client, headers, roster_csv(rows))

    r = client.get("/admin/members/export", headers=headers)
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/csv")
    today = datetime.datetime.now(datetime.timezone.utc).date().isoformat()
    assert f'filename="members-export-{today}.csv"' in r.headers["content-disposition"]

    lines = r.text.splitlines()
    assert lines[0] == ",".join(f'"{h}"' for h in member_svc.EXPORT_HEADERS)
    assert '"O""Neil"' in lines[1]

    parsed = list(csv.reader(io.StringIO(r.text)))
    assert parsed[1][0] == "1001"
    assert parsed[1][3] == 'O"Neil'
    assert parsed[1][7] == "Active"
    assert parsed[2][7] == "Expired"

    only_expired = client.get("/admin/members/export", params={"status": "expired"}, headers=headers)
    assert len(list(csv.reader(io.StringIO(only_expired.text)))) == 2


def test_member_routes_require_admin(client, db_session):
    volunteer = setup_user_with_role(client, db_session, Role.VOLUNTEER)
    for path in ["/admin/members/search", "/admin/members/filters", "/admin/analytics", "/admin/members/export"]:
        assert client.get(path).status_code == 401
        assert client.get(path, headers=auth_header(volunteer["token"])).status_code == 403
