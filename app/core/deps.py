from typing import Generator
import uuid

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.security import decode_access_token
from app.db import session as db_session
from app.db.blob_store import BlobStore
from app.db.roster_store import RosterStore
from app.models.user import User, Role

# Swagger Authorize에서 "Bearer 토큰" 입력받는 스키마
bearer_scheme = HTTPBearer(auto_error=False)


def get_db() -> Generator[Session, None, None]:
    if db_session.SessionLocal is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not configured",
        )
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 프로세스 단위 저장소 (app.main에서 app.state에 등록)
def get_roster_store(request: Request) -> RosterStore:
    return request.app.state.roster_store


def get_blob_store(request: Request) -> BlobStore:
    return request.app.state.blob_store


def _user_from_token(token: str, db: Session) -> User:
    try:
        user_id = uuid.UUID(decode_access_token(token))
    except (JWTError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.scalar(select(User).where(User.id == user_id))
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_current_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session = Depends(get_db),
) -> User:
    if cred is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return _user_from_token(cred.credentials, db)


# DB 미설정이면 None을 넘겨주는 세션 (공개 API용)
def get_optional_db() -> Generator[Session | None, None, None]:
    if db_session.SessionLocal is None:
        yield None
        return
    db = db_session.SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 토큰이 없으면 None (public 호출자). 토큰이 있는데 잘못됐으면 401
def get_optional_user(
    cred: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: Session | None = Depends(get_optional_db),
) -> User | None:
    if cred is None:
        return None
    if db is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not configured",
        )
    return _user_from_token(cred.credentials, db)


ROLE_LEVEL = {
    Role.USER: 0,
    Role.VOLUNTEER: 1,
    Role.ADMIN: 2,
}

def require_min_role(min_role: Role):
    def _checker(current_user: User = Depends(get_current_user)) -> User:
        if ROLE_LEVEL[current_user.role] < ROLE_LEVEL[min_role]:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires role >= {min_role.value}",
            )
        return current_user
    return _checker

get_current_volunteer = require_min_role(Role.VOLUNTEER)
get_current_admin = require_min_role(Role.ADMIN)
