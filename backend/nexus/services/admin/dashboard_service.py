import math

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.blog import BlogRepository
from ...crud.role import RoleRepository
from ...crud.user import UserRepository
from ...models.blog_post import BlogStatus
from ...models.user import UserStatus
from ...schemas.dashboard import DashboardStats, RoleDistribution


class DashboardService:
    """Aggregate counts shown on the console's landing page."""

    def __init__(self, session: AsyncSession):
        self.user_repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.blog_repo = BlogRepository(session)

    async def get_stats(self) -> DashboardStats:
        by_status = await self.user_repo.count_by_status()
        by_role = await self.user_repo.count_by_role()
        roles = await self.role_repo.list_all()

        total_users = sum(by_status.values())
        active_users = by_status.get(UserStatus.ACTIVE.value, 0)

        distribution = []
        for role in roles:
            count = by_role.get(role.id, 0)
            percentage = math.floor(count / total_users * 100 + 0.5) if total_users else 0
            distribution.append(
                RoleDistribution(
                    role_id=role.id, name=role.name, count=count, percentage=percentage
                )
            )

        return DashboardStats(
            total_users=total_users,
            active_users=active_users,
            inactive_users=total_users - active_users,
            total_roles=len(roles),
            total_posts=await self.blog_repo.count(),
            published_posts=await self.blog_repo.count(status=BlogStatus.PUBLISHED.value),
            roles=distribution,
        )
