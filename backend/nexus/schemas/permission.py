from pydantic import Field

from .common import ApiModel


class PermissionBase(ApiModel):
    key: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = ""
    group: str = Field(default="General", min_length=1, max_length=100)


class PermissionCreate(PermissionBase):
    id: str | None = Field(default=None, min_length=1, max_length=64)
    is_system: bool = False


class PermissionUpdate(ApiModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    group: str | None = Field(None, min_length=1, max_length=100)


class PermissionRead(PermissionBase):
    id: str
    is_system: bool


class PermissionGroup(ApiModel):
    group: str
    permissions: list[PermissionRead]
