from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime
from coursemarket.models.user import UserRole


# bcrypt ignores everything past this many bytes
MAX_PASSWORD_BYTES = 72


def _check_password(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if len(v) < 8:
        raise ValueError('Password must be at least 8 characters long')
    if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValueError(f'Password must be at most {MAX_PASSWORD_BYTES} bytes long')
    return v


class UserCreate(BaseModel):
    email: EmailStr
    password: str

    @field_validator('password')
    @classmethod
    def password_strength(cls, v):
        return _check_password(v)


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator('password')
    @classmethod
    def password_strength(cls, v):
        return _check_password(v)


class UserResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)


class Token(BaseModel):
    token: str


class Identity(BaseModel):
    """Who the bearer token says the caller is"""
    id: int
    role: UserRole
