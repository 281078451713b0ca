from fastapi import APIRouter, Depends, Query, status

from ..dependencies import PageParams, get_access_control, get_page_params
from ..schemas.common import DeleteResponse, Page
from ..schemas.user import (
    UserCreate,
    UserDetail,
    UserPermissionsRead,
    UserRead,
    UserUpdate,
)
from ..services.admin import AccessControlService

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=Page[UserRead])
async def list_users(
    search: str | None = Query(None, description="Case-insensitive match on name or email"),
    paging: PageParams = Depends(get_page_params),
    access: AccessControlService = Depends(get_access_control),
) -> Page[UserRead]:
    return await access.users.list(page=paging.page, limit=paging.limit, search=search)


@router.get("/{user_id}", response_model=UserDetail)
async def get_user(
    user_id: str,
    access: AccessControlService = Depends(get_access_control),
) -> UserDetail:
    return await access.users.detail(user_id)


@router.get("/{user_id}/permissions", response_model=UserPermissionsRead)
async def get_user_permissions(
    user_id: str,
    access: AccessControlService = Depends(get_access_control),
) -> UserPermissionsRead:
    user = await access.users.get(user_id)
    permissions = await access.get_user_permissions(user_id)
    return UserPermissionsRead(user_id=user.id, role_id=user.role_id, permissions=permissions)


@router.post("", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def create_user(
    payload: UserCreate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.users.create(payload)


@router.put("/{user_id}", response_model=UserRead)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.users.update(user_id, payload)


@router.delete("/{user_id}", response_model=DeleteResponse)
async def delete_user(
    user_id: str,
    access: AccessControlService = Depends(get_access_control),
) -> DeleteResponse:
    await access.users.delete(user_id)
    return DeleteResponse()
