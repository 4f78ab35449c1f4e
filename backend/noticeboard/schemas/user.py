from typing import Optional

from pydantic import EmailStr, field_validator

from noticeboard.config import settings
from noticeboard.models.user import UserRole
from noticeboard.schemas.common import CamelModel, UTCDateTime

ROLES = {role.value for role in UserRole}


def _check_role(value: str) -> str:
    role = (value or "").strip().lower()
    if role not in ROLES:
        raise ValueError("Invalid role")
    return role


def _check_required(value: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValueError("All fields are required")
    return cleaned


def _check_password(value: str) -> str:
    if len(value or "") < settings.MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters")
    return value


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


class RegisterRequest(CamelModel):
    email: EmailStr
    username: str
    password: str
    full_name: str
    role: str
    department: Optional[str] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str):
        return value.strip().lower()

    @field_validator("username")
    @classmethod
    def normalize_username(cls, value: str):
        return _check_required(value).lower()

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: str):
        return _check_required(value)

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str):
        return _check_password(value)

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: str):
        return _check_role(value)

    @field_validator("department")
    @classmethod
    def normalize_department(cls, value: Optional[str]):
        return _optional_text(value)


class AdminUserCreate(RegisterRequest):
    pass


class AdminUserUpdate(CamelModel):
    full_name: Optional[str] = None
    role: Optional[str] = None
    department: Optional[str] = None
    is_active: Optional[bool] = None
    is_verified: Optional[bool] = None

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, value: Optional[str]):
        if value is None:
            return value
        return _check_required(value)

    @field_validator("role")
    @classmethod
    def validate_role(cls, value: Optional[str]):
        if value is None:
            return value
        return _check_role(value)

    @field_validator("department")
    @classmethod
    def normalize_department(cls, value: Optional[str]):
        return _optional_text(value)


class LoginRequest(CamelModel):
    email: str
    password: str

    @field_validator("email", "password")
    @classmethod
    def validate_present(cls, value: str):
        if not (value or "").strip():
            raise ValueError("Email and password are required")
        return value


class UserSummary(CamelModel):
    id: int
    email: str
    username: str
    full_name: str
    role: str
    department: Optional[str] = None


class UserOut(UserSummary):
    is_verified: bool
    is_active: bool
    is_deleted: bool
    deleted_at: Optional[UTCDateTime] = None
    created_at: UTCDateTime
    updated_at: UTCDateTime


class UserListResponse(CamelModel):
    users: list[UserOut]
    total: int
    page: int
    limit: int
