"""
Auth request/response schemas.
"""
from pydantic import BaseModel, EmailStr, field_validator

from lecture_reports.schemas.common import NonEmptyStr


def _password_within_bcrypt_limit(v: str) -> str:
    if len(v.encode("utf-8")) > 72:
        raise ValueError("Password must be at most 72 bytes (bcrypt limit)")
    return v


class RegisterRequest(BaseModel):
    name: NonEmptyStr
    email: EmailStr
    password: NonEmptyStr
    # Checked against the five roles in the route so the error is InvalidRole, not a schema error
    role: NonEmptyStr

    @field_validator("password")
    @classmethod
    def password_length(cls, v: str) -> str:
        return _password_within_bcrypt_limit(v)


class LoginRequest(BaseModel):
    # Only presence is checked; any mismatch surfaces as the single invalid-credentials error
    email: NonEmptyStr
    password: NonEmptyStr


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str

    class Config:
        from_attributes = True


class RegisterResponse(BaseModel):
    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    message: str
    token: str
    user: UserResponse
