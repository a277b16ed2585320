"""
auth.py

인증(Authentication) API 모음.

이 서비스의 신원 제공자(identity provider) 역할을 한다.
운영진 계정 가입, 로그인, 토큰 재발급, 로그아웃, 현재 권한 조회를 담당하며
JWT 기반 Access Token + Refresh Token 구조를 따른다.

주요 기능:
- 가입 (기본 권한 user, 관리자가 volunteer/admin으로 승격)
- 로그인 및 토큰 발급
- Refresh Token 기반 Access Token 재발급 (회전)
- 로그아웃 (Refresh Token 무효화)
- 현재 호출자의 권한 조회 (비로그인 = public)

설계 원칙:
- Access Token은 Authorization Header로 전달
- Refresh Token은 HttpOnly Cookie로 관리
- Refresh Token Version을 이용해 강제 로그아웃 / 토큰 무효화 처리

관련 파일:
- app.core.security        : 비밀번호 해시 / JWT 생성·검증
- app.core.deps            : 인증 의존성
- app.models.user          : User / Role 모델
- app.schemas.auth         : 인증 관련 요청/응답

"""

import uuid
from jose import JWTError
from fastapi import APIRouter, Depends, HTTPException, status, Response, Request

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy import select

from app.core.deps import get_db, get_current_user, get_optional_user
from app.core.config import settings
from app.core.logging import get_logger
from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
)

from app.models.user import User, Role, PUBLIC_ROLE
from app.schemas.auth import RegisterRequest, LoginRequest, TokenData, CallerInfo

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)

REFRESH_COOKIE_NAME = "refresh_token"


def _set_refresh_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,        # 로컬 False / HTTPS 운영 True
        samesite=settings.COOKIE_SAMESITE,    # "lax" 추천
        domain=settings.COOKIE_DOMAIN,        # 보통 None
        path="/",
        max_age=settings.REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60,
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=REFRESH_COOKIE_NAME, path="/", domain=settings.COOKIE_DOMAIN)


def _issue_tokens(user: User, response: Response) -> dict:
    access = create_access_token(subject=str(user.id), role=user.role.value)
    refresh = create_refresh_token(subject=str(user.id), refresh_token_version=user.refresh_token_version)
    _set_refresh_cookie(response, refresh)
    return {"data": TokenData(access_token=access, role=user.role).model_dump(mode="json")}


"""
가입 API

- 이메일 기준으로 신규 계정 생성
- 기본 권한은 user (명단 관련 기능은 관리자가 권한을 올려줘야 사용 가능)

"""

@router.post("/register")
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    exists = db.scalar(select(User).where(User.email == data.email))
    if exists:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )

    try:
        user = User(
            email=data.email,
            password_hash=get_password_hash(data.password),
            name=data.name,
            role=Role.USER,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Email already registered")
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    logger.info("user registered user_id=%s", user.id)
    return {
        "data": {
            "id": str(user.id),
            "email": user.email,
            "role": user.role.value,
        }
    }


@router.post("/login")
def login(data: LoginRequest, response: Response, db: Session = Depends(get_db)):
    user = db.scalar(select(User).where(User.email == data.email))

    if not user or not verify_password(data.password, user.password_hash):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")

    return _issue_tokens(user, response)


"""
Access Token 재발급 API

- Refresh Token 쿠키를 사용해 새로운 Access Token 발급
- Refresh Token Version이 일치하지 않으면 재발급 거부
- 재발급 시 Refresh Token을 회전(rotation)

"""

@router.post("/refresh")
def refresh(request: Request, response: Response, db: Session = Depends(get_db)):
    token = request.cookies.get(REFRESH_COOKIE_NAME)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing refresh token")

    try:
        user_id, token_rtv = decode_refresh_token(token)
        user_uuid = uuid.UUID(user_id)
    except (JWTError, ValueError, KeyError):
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Invalid refresh token")

    user = db.scalar(select(User).where(User.id == user_uuid))
    if not user:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="User not found")

    if token_rtv != user.refresh_token_version:
        _clear_refresh_cookie(response)
        raise HTTPException(status_code=401, detail="Refresh token revoked")

    user.refresh_token_version += 1
    db.commit()
    db.refresh(user)

    return _issue_tokens(user, response)


@router.post("/logout")
def logout(
    db: Session = Depends(get_db),
    user: User = Depends(get_current_user),
):
    try:
        user.refresh_token_version += 1
        db.commit()
    except Exception as e:
        db.rollback()
        raise HTTPException(status_code=500, detail=f"Database error: {type(e).__name__}")

    response = Response(status_code=204)
    _clear_refresh_cookie(response)
    return response


"""
현재 호출자 권한 조회 API

- 토큰 없음 → public
- 토큰 있음 → DB에 저장된 현재 role (admin / volunteer / user)

"""

@router.get("/me")
def me(user: User | None = Depends(get_optional_user)):
    if user is None:
        caller = CallerInfo(role=PUBLIC_ROLE, is_authenticated=False)
    else:
        caller = CallerInfo(
            role=user.role.value,
            is_authenticated=True,
            id=str(user.id),
            email=user.email,
            name=user.name,
            is_admin=user.role == Role.ADMIN,
            is_volunteer=user.role in (Role.VOLUNTEER, Role.ADMIN),
        )
    return {"data": caller.model_dump(mode="json")}
