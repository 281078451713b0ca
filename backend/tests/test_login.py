from dataclasses import dataclass
from datetime import datetime

import pytest

from nexus.errors import ForbiddenError, NotFoundError
from nexus.models.base import utcnow
from nexus.models.user import UserStatus
from nexus.schemas.user import UserUpdate
from nexus.services.admin import UserRegistry
from nexus.use_cases.auth.login_user import login_user


@dataclass
class FakeUser:
    id: str
    email: str
    role_id: str
    status: str
    last_login: datetime | None = None


class FakeUserPort:
    def __init__(self, existing_user: FakeUser | None = None) -> None:
        self.existing_user = existing_user
        self.last_email: str | None = None
        self.recorded: list[str] = []

    async def get_by_email(self, email: str) -> FakeUser | None:
        self.last_email = email
        return self.existing_user

    async def record_login(self, user: FakeUser) -> FakeUser:
        user.last_login = utcnow()
        self.recorded.append(user.id)
        return user


class TestLoginUseCase:
    @pytest.mark.anyio
    async def test_active_user_is_stamped(self):
        port = FakeUserPort(FakeUser("user-1", "a@b.c", "role-user", UserStatus.ACTIVE.value))
        before = utcnow()

        user = await login_user(port, "a@b.c")

        assert port.last_email == "a@b.c"
        assert port.recorded == ["user-1"]
        assert user.last_login >= before

    @pytest.mark.anyio
    async def test_unknown_email_is_not_found(self):
        port = FakeUserPort()

        with pytest.raises(NotFoundError, match="User not found"):
            await login_user(port, "nobody@b.c")

        assert port.recorded == []

    @pytest.mark.anyio
    @pytest.mark.parametrize("status", ["INACTIVE", "PENDING", "BANNED"])
    async def test_non_active_user_is_forbidden(self, status):
        port = FakeUserPort(FakeUser("user-1", "a@b.c", "role-user", status))

        with pytest.raises(ForbiddenError, match="User is not active"):
            await login_user(port, "a@b.c")

        assert port.recorded == []
        assert port.existing_user.last_login is None


class TestLoginAgainstRegistry:
    @pytest.mark.anyio
    async def test_seeded_admin_can_log_in(self, session, database):
        before = utcnow()

        user = await login_user(UserRegistry(session), "admin@nexus.com")

        assert user.id == "user-admin"
        assert user.last_login >= before

        async with database.session() as other:
            stored = await UserRegistry(other).get("user-admin")
            assert stored.last_login is not None
            assert stored.last_login >= before

    @pytest.mark.anyio
    async def test_inactive_user_keeps_last_login(self, session):
        registry = UserRegistry(session)
        await registry.update("user-demo", UserUpdate(status=UserStatus.INACTIVE))

        with pytest.raises(ForbiddenError):
            await login_user(registry, "demo@nexus.com")

        assert (await registry.get("user-demo")).last_login is None
