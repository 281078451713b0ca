from fastapi import APIRouter, Depends, status

from ..dependencies import get_access_control
from ..schemas.common import DeleteResponse
from ..schemas.role import RoleCreate, RoleDeletabilityRead, RoleRead, RoleUpdate
from ..services.admin import AccessControlService

router = APIRouter(prefix="/roles", tags=["roles"])


@router.get("", response_model=list[RoleRead])
async def list_roles(access: AccessControlService = Depends(get_access_control)):
    return await access.roles.list()


@router.get("/{role_id}", response_model=RoleRead)
async def get_role(role_id: str, access: AccessControlService = Depends(get_access_control)):
    return await access.roles.get(role_id)


@router.get("/{role_id}/deletability", response_model=RoleDeletabilityRead)
async def get_role_deletability(
    role_id: str,
    access: AccessControlService = Depends(get_access_control),
) -> RoleDeletabilityRead:
    state, assigned = await access.role_deletability(role_id)
    return RoleDeletabilityRead(role_id=role_id, state=state, assigned_users=assigned)


@router.post("", response_model=RoleRead, status_code=status.HTTP_201_CREATED)
async def create_role(
    payload: RoleCreate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.roles.create(payload)


@router.put("/{role_id}", response_model=RoleRead)
async def update_role(
    role_id: str,
    payload: RoleUpdate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.roles.update(role_id, payload)


@router.delete("/{role_id}", response_model=DeleteResponse)
async def delete_role(
    role_id: str,
    access: AccessControlService = Depends(get_access_control),
) -> DeleteResponse:
    """Refused for system roles and for roles still assigned to a user."""
    await access.delete_role(role_id)
    return DeleteResponse()
