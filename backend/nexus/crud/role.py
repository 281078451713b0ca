from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.role import Role
from ..models.user import User


class RoleRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, role: Role) -> Role:
        self.session.add(role)
        await self.session.flush()
        await self.session.refresh(role)
        return role

    async def get_by_id(self, role_id: str, *, for_update: bool = False) -> Role | None:
        if not for_update:
            return await self.session.get(Role, role_id)
        # Row lock on backends that support it; SQLite relies on the connection guard.
        result = await self.session.execute(
            select(Role)
            .where(Role.id == role_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Role]:
        result = await self.session.execute(
            select(Role).order_by(Role.created_at, Role.id)
        )
        return list(result.scalars().all())

    async def names_by_id(self, role_ids: set[str]) -> dict[str, str]:
        if not role_ids:
            return {}
        result = await self.session.execute(
            select(Role.id, Role.name).where(Role.id.in_(role_ids))
        )
        return {role_id: name for role_id, name in result.all()}

    async def count_assigned_users(self, role_id: str) -> int:
        result = await self.session.execute(
            select(func.count()).select_from(User).where(User.role_id == role_id)
        )
        return int(result.scalar_one())

    async def strip_permission_key(self, key: str) -> list[str]:
        """Remove ``key`` from every role holding it; returns affected role ids."""
        affected: list[str] = []
        result = await self.session.execute(
            select(Role)
            .order_by(Role.created_at, Role.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        for role in result.scalars().all():
            if key in role.permissions:
                # New list object so the JSON column is flagged dirty.
                role.permissions = [k for k in role.permissions if k != key]
                affected.append(role.id)
        await self.session.flush()
        return affected

    async def delete(self, role: Role) -> None:
        await self.session.delete(role)
        await self.session.flush()
