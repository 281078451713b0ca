from datetime import datetime

from pydantic import Field

from ..models.user import UserStatus
from .common import ApiModel


class UserBase(ApiModel):
    email: str = Field(..., min_length=3, max_length=320)
    name: str = Field(..., min_length=1, max_length=255)
    role_id: str = Field(..., min_length=1, max_length=64)
    status: UserStatus = UserStatus.ACTIVE
    avatar_url: str | None = Field(None, max_length=1024)
    bio: str | None = None


class UserCreate(UserBase):
    pass


class UserUpdate(ApiModel):
    email: str | None = Field(None, min_length=3, max_length=320)
    name: str | None = Field(None, min_length=1, max_length=255)
    role_id: str | None = Field(None, min_length=1, max_length=64)
    status: UserStatus | None = None
    avatar_url: str | None = Field(None, max_length=1024)
    bio: str | None = None


class UserRead(UserBase):
    id: str
    created_at: datetime
    last_login: datetime | None = None


class UserDetail(UserRead):
    role_name: str | None = None


class UserPermissionsRead(ApiModel):
    user_id: str
    role_id: str
    permissions: list[str]
