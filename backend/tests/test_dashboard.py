import pytest

from nexus.models.user import UserStatus
from nexus.schemas.user import UserCreate
from nexus.services.admin import DashboardService, UserRegistry


class TestDashboardStats:
    @pytest.mark.anyio
    async def test_seeded_stats(self, session):
        stats = await DashboardService(session).get_stats()

        assert stats.total_users == 2
        assert stats.active_users == 2
        assert stats.inactive_users == 0
        assert stats.total_roles == 3
        assert stats.total_posts == 2
        assert stats.published_posts == 1
        assert [(r.role_id, r.count, r.percentage) for r in stats.roles] == [
            ("role-admin", 1, 50),
            ("role-manager", 1, 50),
            ("role-user", 0, 0),
        ]

    @pytest.mark.anyio
    async def test_percentages_round_half_up(self, session):
        users = UserRegistry(session)
        await users.create(
            UserCreate(
                email="off@nexus.com",
                name="Off",
                role_id="role-user",
                status=UserStatus.INACTIVE,
            )
        )

        stats = await DashboardService(session).get_stats()

        assert stats.total_users == 3
        assert stats.inactive_users == 1
        # 1/3 of users per role -> 33
        assert {r.role_id: r.percentage for r in stats.roles} == {
            "role-admin": 33,
            "role-manager": 33,
            "role-user": 33,
        }

    @pytest.mark.anyio
    async def test_empty_store(self, empty_database):
        async with empty_database.session() as session:
            stats = await DashboardService(session).get_stats()

        assert stats.total_users == 0
        assert stats.roles == []
        assert stats.total_posts == 0
