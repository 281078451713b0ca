"""
Access-control facade.

The only entry point for the two deletions that carry cross-entity
invariants:

- ``delete_role``: refused for system roles and for roles still assigned
  to at least one user
- ``delete_permission``: refused for system permissions; otherwise the
  definition is removed and its key stripped from every role

Both run their check and their writes inside ONE transaction on the
session they were given, so no caller observes a half-applied cascade.
Everything without a cross-entity invariant is reached through the
registry properties and goes straight to the owning registry.
"""
from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.permission import PermissionRepository
from ...crud.role import RoleRepository
from ...database import committing
from ...domain.invariants import (
    RoleDeletability,
    ensure_permission_deletable,
    ensure_role_deletable,
    role_deletability,
)
from ...domain.ports.references import ReferencePolicy
from ...errors import NotFoundError
from ..references import LooseReferencePolicy
from .blog_registry import BlogRegistry
from .permission_registry import PermissionRegistry
from .role_registry import RoleRegistry
from .user_registry import UserRegistry

logger = logging.getLogger(__name__)


class AccessControlService:
    def __init__(self, session: AsyncSession, references: ReferencePolicy | None = None):
        self.session = session
        self.references = references or LooseReferencePolicy()
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)

        self.permissions = PermissionRegistry(session)
        self.roles = RoleRegistry(session, self.references)
        self.users = UserRegistry(session, self.references)
        self.blogs = BlogRegistry(session, self.references)

    async def role_deletability(self, role_id: str) -> tuple[RoleDeletability, int]:
        """Current deletability state of a role and its assigned-user count.

        Raises:
            NotFoundError: If the role does not exist
        """
        role = await self.roles.get(role_id)
        assigned = await self.role_repo.count_assigned_users(role_id)
        return role_deletability(is_system=role.is_system, assigned_users=assigned), assigned

    async def delete_role(self, role_id: str) -> None:
        """Delete a role that is neither a system role nor assigned to anyone.

        Raises:
            NotFoundError: If the role does not exist
            ForbiddenError: If the role is a system role or in use
        """
        async with committing(self.session):
            # Locks the role against a concurrent reassignment until commit
            role = await self.role_repo.get_by_id(role_id, for_update=True)
            if role is None:
                raise NotFoundError("Role not found", details={"role_id": role_id})

            assigned = await self.role_repo.count_assigned_users(role_id)
            ensure_role_deletable(role_id, is_system=role.is_system, assigned_users=assigned)
            await self.role_repo.delete(role)

        logger.info("role_deleted role_id=%s", role_id)

    async def delete_permission(self, permission_id: str) -> list[str]:
        """Delete a non-system permission and strip its key from all roles.

        Returns:
            Ids of the roles that lost the key

        Raises:
            NotFoundError: If the permission does not exist
            ForbiddenError: If the permission is a system permission
        """
        async with committing(self.session):
            permission = await self.permission_repo.get_by_id(permission_id)
            if permission is None:
                raise NotFoundError(
                    "Permission not found", details={"permission_id": permission_id}
                )

            ensure_permission_deletable(
                permission_id, key=permission.key, is_system=permission.is_system
            )
            key = permission.key
            await self.permission_repo.delete(permission)
            affected = await self.role_repo.strip_permission_key(key)

        logger.info(
            "permission_deleted permission_id=%s key=%s stripped_from=%s",
            permission_id,
            key,
            affected,
        )
        return affected

    async def get_user_permissions(self, user_id: str) -> list[str]:
        """Effective permission keys of a user, via the user's role.

        A dangling ``role_id`` yields no permissions rather than an error.
        """
        user = await self.users.get(user_id)
        role = await self.role_repo.get_by_id(user.role_id)
        if role is None:
            return []
        return sorted(set(role.permissions))

    async def has_permission(self, user_id: str, key: str) -> bool:
        return key in await self.get_user_permissions(user_id)
