"""
security.py

비밀번호 해싱 및 JWT 토큰 생성/검증 유틸리티.

로그인한 운영진(관리자/봉사자/일반 사용자)의 인증에 쓰이는
저수준 보안 기능만 제공하며, 라우터나 비즈니스 로직은 포함하지 않는다.

주요 기능:
- 비밀번호 해싱 및 검증 (bcrypt)
- Access Token 생성 / 디코딩 (role 클레임 포함)
- Refresh Token 생성 / 디코딩 (rtv 버전 포함)

설계 원칙:
- Access Token과 Refresh Token은 서로 다른 시크릿 사용
- Refresh Token에 version(rtv)을 포함하여 강제 로그아웃/토큰 무효화 지원
- role 클레임은 표시용일 뿐, 권한 판단은 항상 DB의 현재 role 기준
- 시간 기반(exp) 만료는 UTC 기준

관련 파일:
- app.core.config        : JWT 시크릿 키 및 만료 설정
- app.core.deps          : 토큰을 실제로 검증하는 인증 의존성
- app.routers.auth       : 로그인 / 재발급 API

"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Literal

from jose import jwt, JWTError
from passlib.context import CryptContext

from app.core.config import settings


pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def _create_token(*, subject: str, token_type: Literal["access", "refresh"],
                  expires_delta: timedelta, secret: str, extra: Optional[dict] = None) -> str:
    expire = datetime.now(timezone.utc) + expires_delta
    payload = {
        "sub": subject,
        "type": token_type,
        "exp": int(expire.timestamp()),
    }
    if extra:
        payload.update(extra)
    return jwt.encode(payload, secret, algorithm=settings.ALGORITHM)


def create_access_token(subject: str, role: str, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        subject=subject,
        token_type="access",
        expires_delta=expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
        secret=settings.SECRET_KEY,
        extra={"role": role},
    )


def create_refresh_token(subject: str, refresh_token_version: int, expires_delta: Optional[timedelta] = None) -> str:
    return _create_token(
        subject=subject,
        token_type="refresh",
        expires_delta=expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        secret=settings.REFRESH_SECRET_KEY,
        extra={"rtv": refresh_token_version},
    )


"""
Access Token 디코딩

- access 타입만 허용 (refresh 토큰으로 API 호출 차단)
- subject(user_id) 반환, 유효하지 않으면 JWTError

"""

def decode_access_token(token: str) -> str:
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "access":
        raise JWTError("Not an access token")
    sub = payload.get("sub")
    if not sub:
        raise JWTError("Missing subject")
    return sub


def decode_refresh_token(token: str) -> tuple[str, int]:
    payload = jwt.decode(token, settings.REFRESH_SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type") != "refresh":
        raise JWTError("Not a refresh token")
    sub = payload["sub"]
    rtv = int(payload.get("rtv", -1))
    return sub, rtv
