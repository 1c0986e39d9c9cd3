from datetime import datetime

from pydantic import EmailStr

from marketplace.models.user import UserRole
from marketplace.schemas.common import CamelModel


class UserResponse(CamelModel):
    id: int
    username: str
    first_name: str | None
    last_name: str | None
    full_name: str
    email: EmailStr
    phone: str | None
    avatar: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: datetime


class PublicUserResponse(CamelModel):
    id: int
    username: str
    full_name: str
    avatar: str
    role: UserRole
    created_at: datetime


class UserUpdate(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    avatar: str | None = None


class AdminUserCreate(CamelModel):
    first_name: str
    last_name: str
    email: EmailStr
    password: str
    phone: str | None = None
    role: UserRole = UserRole.USER
