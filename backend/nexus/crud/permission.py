from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.permission import Permission


class PermissionRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, permission: Permission) -> Permission:
        self.session.add(permission)
        await self.session.flush()
        await self.session.refresh(permission)
        return permission

    async def get_by_id(self, permission_id: str) -> Permission | None:
        return await self.session.get(Permission, permission_id)

    async def get_by_key(self, key: str) -> Permission | None:
        result = await self.session.execute(
            select(Permission).where(Permission.key == key)
        )
        return result.scalar_one_or_none()

    async def list_all(self) -> list[Permission]:
        result = await self.session.execute(
            select(Permission).order_by(Permission.created_at, Permission.id)
        )
        return list(result.scalars().all())

    async def existing_keys(self, keys: list[str]) -> set[str]:
        if not keys:
            return set()
        result = await self.session.execute(
            select(Permission.key).where(Permission.key.in_(keys))
        )
        return set(result.scalars().all())

    async def delete(self, permission: Permission) -> None:
        await self.session.delete(permission)
        await self.session.flush()
