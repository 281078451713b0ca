from pydantic import Field

from ..domain.invariants import RoleDeletability
from .common import ApiModel


class RoleBase(ApiModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    permissions: list[str] = Field(default_factory=list)


class RoleCreate(RoleBase):
    is_system: bool = False


class RoleUpdate(ApiModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = None
    # Replaces the whole permission set when present.
    permissions: list[str] | None = None


class RoleRead(RoleBase):
    id: str
    is_system: bool


class RoleDeletabilityRead(ApiModel):
    role_id: str
    state: RoleDeletability
    assigned_users: int
