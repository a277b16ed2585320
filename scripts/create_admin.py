"""

ADMIN 초기 계정 생성 스크립트.

- 서버 최초 세팅 시 단 한 번 실행하는 용도
- .env에 정의된 ADMIN_* 환경 변수를 읽어 ADMIN 계정을 생성한다.
- 이미 ADMIN 계정이 하나라도 있으면 생성하지 않고 종료한다.
- 테이블이 없으면 먼저 생성한다.

사용 목적:
- 명단 업로드 / 권한 관리 API에 접근할 수 있는
  첫 관리자 계정을 안전하게 초기화하기 위함

사용 방법
- 가상환경 접속
- (.venv) ~\backend~$ python -m scripts.create_admin

"""

import os
from dotenv import load_dotenv
load_dotenv()

from sqlalchemy import select
import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import SessionLocal, engine
from app.models.user import User, Role
from app.core.security import get_password_hash


def main():
    if SessionLocal is None:
        raise RuntimeError("DATABASE_URL is not set")

    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        exists = db.scalar(select(User).where(User.role == Role.ADMIN))
        if exists:
            print("ADMIN already exists. Skip creation.")
            return

        email = os.environ["ADMIN_EMAIL"]
        password = os.environ["ADMIN_PASSWORD"]
        name = os.environ.get("ADMIN_NAME", "Admin")

        user = db.scalar(select(User).where(User.email == email))
        if user:
            # 이미 가입한 계정이면 권한만 올림
            user.role = Role.ADMIN
        else:
            user = User(
                email=email,
                password_hash=get_password_hash(password),
                name=name,
                role=Role.ADMIN,
            )
            db.add(user)
        db.commit()

        print(f"ADMIN ready: {email}")

    finally:
        db.close()


if __name__ == "__main__":
    main()
