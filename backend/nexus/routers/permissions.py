from fastapi import APIRouter, Depends, Query, status

from ..dependencies import get_access_control
from ..schemas.common import DeleteResponse
from ..schemas.permission import (
    PermissionCreate,
    PermissionGroup,
    PermissionRead,
    PermissionUpdate,
)
from ..services.admin import AccessControlService

router = APIRouter(prefix="/permissions", tags=["permissions"])


@router.get("", response_model=list[PermissionRead] | list[PermissionGroup])
async def list_permissions(
    grouped: bool = Query(False, description="Group permissions by their group label"),
    access: AccessControlService = Depends(get_access_control),
):
    if not grouped:
        return [PermissionRead.model_validate(p) for p in await access.permissions.list()]

    groups = await access.permissions.list_grouped()
    return [
        PermissionGroup(
            group=group,
            permissions=[PermissionRead.model_validate(p) for p in items],
        )
        for group, items in groups
    ]


@router.get("/{permission_id}", response_model=PermissionRead)
async def get_permission(
    permission_id: str,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.permissions.get(permission_id)


@router.post("", response_model=PermissionRead, status_code=status.HTTP_201_CREATED)
async def create_permission(
    payload: PermissionCreate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.permissions.create(payload)


@router.put("/{permission_id}", response_model=PermissionRead)
async def update_permission(
    permission_id: str,
    payload: PermissionUpdate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.permissions.update(permission_id, payload)


@router.delete("/{permission_id}", response_model=DeleteResponse)
async def delete_permission(
    permission_id: str,
    access: AccessControlService = Depends(get_access_control),
) -> DeleteResponse:
    """Remove a custom permission and strip its key from every role."""
    await access.delete_permission(permission_id)
    return DeleteResponse()
