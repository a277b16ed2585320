# tests/helpers.py
import uuid
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.models.user import User, Role
from app.core.security import get_password_hash
from app.services.roster_mapper import REQUIRED_HEADERS


def auth_header(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_user_in_db(db: Session, *, email: str, password: str, role: Role = Role.USER, name: str = "") -> User:
    user = User(
        email=email,
        password_hash=get_password_hash(password),
        name=name or role.value.upper(),
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_admin_in_db(db: Session, *, email: str, password: str) -> User:
    return create_user_in_db(db, email=email, password=password, role=Role.ADMIN)


def login(client, email: str, password: str) -> str:
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200, r.text
    return r.json()["data"]["access_token"]


def setup_user_with_role(client, db: Session, role: Role) -> dict:
    """
    지정한 role의 계정을 만들고 로그인 토큰까지 발급
    """
    email = f"{role.value}_{uuid.uuid4().hex[:6]}@test.com"
    password = "Passw0rd!Test"
    user = create_user_in_db(db, email=email, password=password, role=role)
    return {
        "id": str(user.id),
        "email": email,
        "password": password,
        "token": login(client, email, password),
    }


def admin_headers(client, db: Session) -> dict:
    return auth_header(setup_user_with_role(client, db, Role.ADMIN)["token"])


def get_user(db: Session, user_id: str) -> User:
    return db.scalar(select(User).where(User.id == uuid.UUID(user_id)))


def roster_csv(rows: list[dict], headers=None) -> bytes:
    """
    헤더 이름 → 값 dict 목록으로 명단 CSV 생성 (없는 열은 빈 값)
    """
    headers = list(headers or REQUIRED_HEADERS)
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(str(row.get(h, "")) for h in headers))
    return ("\n".join(lines) + "\n").encode("utf-8")


def member_row(member_number: str, first: str, last: str, renew_year: str = "2099", extra: dict | None = None) -> dict:
    row = {
        "Member Number": member_number,
        "First Name": first,
        "Last Name": last,
        "Email Address": f"{first.lower()}@example.com",
        "IEEE Status": "Member",
        "Renew Year": renew_year,
        "Region": "R10",
        "Section": "Seoul",
        "School Name": "Test University",
    }
    row.update(extra or {})
    return row


def upload_csv(client, headers: dict, data: bytes, filename: str = "members.csv"):
    return client.post(
        "/admin/datasets/upload",
        files={"file": (filename, data, "text/csv")},
        headers=headers,
    )
