from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User, UserStatus


def _search_clause(search: str):
    return or_(
        User.name.icontains(search, autoescape=True),
        User.email.icontains(search, autoescape=True),
    )


class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, user: User) -> User:
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_id(self, user_id: str) -> User | None:
        return await self.session.get(User, user_id)

    async def find_by_email(self, email: str) -> list[User]:
        result = await self.session.execute(
            select(User)
            .where(User.email == email)
            .order_by(User.created_at, User.id)
        )
        return list(result.scalars().all())

    async def list_page(
        self, *, offset: int, limit: int, search: str | None = None
    ) -> tuple[list[User], int]:
        query = select(User)
        count_query = select(func.count()).select_from(User)
        if search:
            clause = _search_clause(search)
            query = query.where(clause)
            count_query = count_query.where(clause)

        total = int((await self.session.execute(count_query)).scalar_one())
        result = await self.session.execute(
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def count_by_status(self) -> dict[str, int]:
        result = await self.session.execute(
            select(User.status, func.count()).group_by(User.status)
        )
        counts = {status.value: 0 for status in UserStatus}
        counts.update({status: int(count) for status, count in result.all()})
        return counts

    async def count_by_role(self) -> dict[str, int]:
        result = await self.session.execute(
            select(User.role_id, func.count()).group_by(User.role_id)
        )
        return {role_id: int(count) for role_id, count in result.all()}

    async def delete(self, user: User) -> None:
        await self.session.delete(user)
        await self.session.flush()
