"""Permission definitions: the leaf of the access-control model."""
from __future__ import annotations

import logging
from itertools import groupby

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.permission import PermissionRepository
from ...database import committing
from ...domain.invariants import ensure_permission_key_free
from ...errors import ConflictError, DuplicateKeyError, NotFoundError
from ...models.permission import Permission
from ...schemas.permission import PermissionCreate, PermissionUpdate

logger = logging.getLogger(__name__)


class PermissionRegistry:
    """CRUD over permission definitions.

    Deletion is not offered here: it cascades into roles and is owned by
    ``AccessControlService.delete_permission``.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.repo = PermissionRepository(session)

    async def list(self) -> list[Permission]:
        return await self.repo.list_all()

    async def list_grouped(self) -> list[tuple[str, list[Permission]]]:
        permissions = sorted(await self.repo.list_all(), key=lambda p: p.group)
        return [(group, list(items)) for group, items in groupby(permissions, key=lambda p: p.group)]

    async def get(self, permission_id: str) -> Permission:
        permission = await self.repo.get_by_id(permission_id)
        if permission is None:
            raise NotFoundError("Permission not found", details={"permission_id": permission_id})
        return permission

    async def create(self, data: PermissionCreate) -> Permission:
        async with committing(self.session):
            if data.id is not None and await self.repo.get_by_id(data.id) is not None:
                raise ConflictError(
                    "Permission id already exists", details={"permission_id": data.id}
                )
            existing = await self.repo.get_by_key(data.key)
            ensure_permission_key_free(data.key, existing_id=existing.id if existing else None)

            values = data.model_dump(exclude={"id"})
            if data.id is not None:
                values["id"] = data.id
            try:
                permission = await self.repo.add(Permission(**values))
            except IntegrityError as exc:
                # A concurrent insert took the key after the lookup above
                logger.warning("permission_key_race key=%s", data.key)
                raise DuplicateKeyError(
                    f'Permission key "{data.key}" already exists.',
                    details={"key": data.key},
                ) from exc

        logger.info(
            "permission_created permission_id=%s key=%s system=%s",
            permission.id,
            permission.key,
            permission.is_system,
        )
        return permission

    async def update(self, permission_id: str, patch: PermissionUpdate) -> Permission:
        async with committing(self.session):
            permission = await self.get(permission_id)
            for field, value in patch.model_dump(exclude_unset=True).items():
                if value is not None:
                    setattr(permission, field, value)
            await self.session.flush()

        logger.info("permission_updated permission_id=%s", permission_id)
        return permission
