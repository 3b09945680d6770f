import re
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, HttpUrl, field_validator
from pydantic.alias_generators import to_camel

from tasktrack.models.user import UserRole
from tasktrack.schemas.task import as_utc

NAME_MIN, NAME_MAX = 2, 50
BIO_MAX = 500
PASSWORD_MIN = 6
_PASSWORD_MIX = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _clean_name(v: str) -> str:
    v = v.strip()
    if not NAME_MIN <= len(v) <= NAME_MAX:
        raise ValueError(f"Name must be between {NAME_MIN} and {NAME_MAX} characters")
    return v


class _EmailNormalized(BaseModel):
    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def normalized(cls, v):
        return normalize_email(v) if isinstance(v, str) else v


class UserCreate(_EmailNormalized):
    name: str
    password: str

    @field_validator("name")
    @classmethod
    def name_length(cls, v):
        return _clean_name(v)

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: str) -> str:
        """Minimum length and character mix, plus bcrypt's 72-byte limit."""
        if len(v) < PASSWORD_MIN:
            raise ValueError(f"Password must be at least {PASSWORD_MIN} characters long")
        if not _PASSWORD_MIX.match(v):
            raise ValueError("Password must contain at least one uppercase letter, one lowercase letter, and one number")
        if len(v.encode("utf-8")) > 72:
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
        return v


class UserLogin(_EmailNormalized):
    password: str

    @field_validator("password")
    @classmethod
    def password_present(cls, v):
        if not v:
            raise ValueError("Password is required")
        return v


class UserUpdate(BaseModel):
    """Partial profile update; ``bio`` and ``avatar`` may be null to clear them."""

    name: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[HttpUrl] = None

    @field_validator("name", mode="before")
    @classmethod
    def name_not_null(cls, v):
        if v is None:
            raise ValueError("may not be null")
        return v

    @field_validator("name")
    @classmethod
    def name_length(cls, v):
        return _clean_name(v)

    @field_validator("bio")
    @classmethod
    def bio_length(cls, v):
        if v is None:
            return None
        v = v.strip()
        if len(v) > BIO_MAX:
            raise ValueError(f"Bio cannot exceed {BIO_MAX} characters")
        return v or None

    def patch(self) -> Dict[str, Any]:
        return self.model_dump(exclude_unset=True, mode="json")


class UserOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    email: EmailStr
    bio: Optional[str] = None
    avatar: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

    @field_validator("created_at", "updated_at")
    @classmethod
    def utc(cls, v):
        return as_utc(v)


class LoginOut(BaseModel):
    token: str
    user: UserOut
