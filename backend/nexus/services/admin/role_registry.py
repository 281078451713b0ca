"""Role definitions and the permission keys they hold."""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.role import RoleRepository
from ...database import committing
from ...domain.ports.references import ReferencePolicy
from ...errors import NotFoundError
from ...models.role import Role
from ...schemas.role import RoleCreate, RoleUpdate
from ..references import LooseReferencePolicy

logger = logging.getLogger(__name__)


def normalize_permission_keys(keys: list[str]) -> list[str]:
    """Drop duplicate keys, keeping first-occurrence order."""
    return list(dict.fromkeys(keys))


class RoleRegistry:
    def __init__(self, session: AsyncSession, references: ReferencePolicy | None = None):
        self.session = session
        self.repo = RoleRepository(session)
        self.references = references or LooseReferencePolicy()

    async def list(self) -> list[Role]:
        return await self.repo.list_all()

    async def get(self, role_id: str) -> Role:
        role = await self.repo.get_by_id(role_id)
        if role is None:
            raise NotFoundError("Role not found", details={"role_id": role_id})
        return role

    async def create(self, data: RoleCreate) -> Role:
        permissions = normalize_permission_keys(data.permissions)
        async with committing(self.session):
            await self.references.check_role_permissions(permissions)
            role = await self.repo.add(
                Role(
                    name=data.name,
                    description=data.description,
                    permissions=permissions,
                    is_system=data.is_system,
                )
            )

        logger.info(
            "role_created role_id=%s permissions=%d system=%s",
            role.id,
            len(role.permissions),
            role.is_system,
        )
        return role

    async def update(self, role_id: str, patch: RoleUpdate) -> Role:
        async with committing(self.session):
            role = await self.get(role_id)
            changes = patch.model_dump(exclude_unset=True)

            permissions = changes.pop("permissions", None)
            if permissions is not None:
                permissions = normalize_permission_keys(permissions)
                await self.references.check_role_permissions(permissions)
                role.permissions = permissions

            for field, value in changes.items():
                if value is not None:
                    setattr(role, field, value)
            await self.session.flush()

        logger.info("role_updated role_id=%s", role_id)
        return role
