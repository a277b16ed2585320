from pydantic import BaseModel, EmailStr, Field

from app.models.user import Role


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=64)
    name: str = Field(default="", max_length=100)

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

# 로그인 / 재발급 응답 (refresh token은 쿠키로만 전달)
class TokenData(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role

# /auth/me 응답. 비로그인이면 role="public"만 채워짐
class CallerInfo(BaseModel):
    role: str
    is_authenticated: bool
    id: str | None = None
    email: str | None = None
    name: str | None = None
    is_admin: bool = False
    is_volunteer: bool = False
