"""
Tests for the access-control facade.

Covers the guarded deletions (system and in-use roles, system permissions),
the permission cascade into roles, and effective-permission lookups.
"""
import asyncio

import pytest

from nexus.crud.role import RoleRepository
from nexus.domain.invariants import RoleDeletability
from nexus.errors import ForbiddenError, NotFoundError
from nexus.schemas.permission import PermissionCreate
from nexus.schemas.role import RoleCreate, RoleUpdate
from nexus.schemas.user import UserCreate, UserUpdate
from nexus.services.admin import AccessControlService
from nexus.services.references import StrictReferencePolicy


@pytest.fixture
def access(session) -> AccessControlService:
    return AccessControlService(session)


class TestDeleteRole:
    """Role deletion is refused for system roles and roles in use."""

    @pytest.mark.anyio
    async def test_system_role_is_forbidden(self, access):
        with pytest.raises(ForbiddenError) as exc_info:
            await access.delete_role("role-admin")

        assert exc_info.value.message == "Cannot delete system role"
        assert exc_info.value.status_code == 403
        assert await access.roles.get("role-admin") is not None

    @pytest.mark.anyio
    async def test_role_in_use_is_forbidden(self, access):
        with pytest.raises(ForbiddenError) as exc_info:
            await access.delete_role("role-manager")

        assert exc_info.value.message == "Cannot delete role in use"
        assert exc_info.value.details["assigned_users"] == 1

    @pytest.mark.anyio
    async def test_system_check_takes_precedence_over_in_use(self, access):
        """role-admin is both system and assigned; the system reason wins."""
        with pytest.raises(ForbiddenError, match="system role"):
            await access.delete_role("role-admin")

    @pytest.mark.anyio
    async def test_unassigned_custom_role_is_deleted(self, access):
        role = await access.roles.create(RoleCreate(name="Editor", permissions=["blog:write"]))

        await access.delete_role(role.id)

        with pytest.raises(NotFoundError):
            await access.roles.get(role.id)

    @pytest.mark.anyio
    async def test_role_becomes_deletable_after_last_user_moves(self, access):
        await access.users.update("user-demo", UserUpdate(role_id="role-user"))

        state, assigned = await access.role_deletability("role-manager")
        assert state is RoleDeletability.DELETABLE
        assert assigned == 0

        await access.delete_role("role-manager")
        assert [r.id for r in await access.roles.list()] == ["role-admin", "role-user"]

    @pytest.mark.anyio
    async def test_missing_role_is_not_found(self, access):
        with pytest.raises(NotFoundError):
            await access.delete_role("role-missing")


class TestRoleDeletability:
    @pytest.mark.anyio
    async def test_seed_states(self, access):
        assert (await access.role_deletability("role-admin"))[0] is RoleDeletability.BLOCKED_SYSTEM
        assert (await access.role_deletability("role-user"))[0] is RoleDeletability.BLOCKED_SYSTEM
        assert (await access.role_deletability("role-manager")) == (
            RoleDeletability.BLOCKED_IN_USE,
            1,
        )


class TestDeletePermission:
    """Permission deletion cascades the key out of every role."""

    @pytest.mark.anyio
    async def test_system_permission_is_forbidden(self, access):
        with pytest.raises(ForbiddenError, match="Cannot delete system permission"):
            await access.delete_permission("perm-1")

        role = await access.roles.get("role-admin")
        assert "user:read" in role.permissions

    @pytest.mark.anyio
    async def test_cascade_strips_key_from_every_role(self, access):
        permission = await access.permissions.create(
            PermissionCreate(key="report:export", name="Export Reports", group="Reports")
        )
        await access.roles.update(
            "role-admin",
            RoleUpdate(permissions=["user:read", "report:export"]),
        )
        editor = await access.roles.create(
            RoleCreate(name="Reporter", permissions=["report:export", "blog:read"])
        )

        affected = await access.delete_permission(permission.id)

        assert sorted(affected) == sorted(["role-admin", editor.id])
        for role in await access.roles.list():
            assert "report:export" not in role.permissions
        assert (await access.roles.get(editor.id)).permissions == ["blog:read"]
        with pytest.raises(NotFoundError):
            await access.permissions.get(permission.id)

    @pytest.mark.anyio
    async def test_cascade_is_persisted(self, access, database):
        permission = await access.permissions.create(
            PermissionCreate(key="audit:view", name="View Audit")
        )
        role = await access.roles.create(RoleCreate(name="Auditor", permissions=["audit:view"]))

        await access.delete_permission(permission.id)

        async with database.session() as other:
            reloaded = AccessControlService(other)
            assert (await reloaded.roles.get(role.id)).permissions == []
            assert [p.key for p in await reloaded.permissions.list()].count("audit:view") == 0

    @pytest.mark.anyio
    async def test_missing_permission_is_not_found(self, access):
        with pytest.raises(NotFoundError):
            await access.delete_permission("perm-missing")


class TestEffectivePermissions:
    @pytest.mark.anyio
    async def test_permissions_come_from_role(self, access):
        assert await access.get_user_permissions("user-demo") == sorted(
            ["user:read", "user:write", "user:delete", "blog:read", "blog:write"]
        )
        assert await access.has_permission("user-demo", "blog:write")
        assert not await access.has_permission("user-demo", "role:write")

    @pytest.mark.anyio
    async def test_dangling_role_yields_no_permissions(self, access):
        user = await access.users.create(
            UserCreate(email="ghost@nexus.com", name="Ghost", role_id="role-gone")
        )

        assert await access.get_user_permissions(user.id) == []

    @pytest.mark.anyio
    async def test_unknown_user_is_not_found(self, access):
        with pytest.raises(NotFoundError):
            await access.get_user_permissions("user-missing")


class TestReassignmentScenario:
    """Role and permission lifecycle across a user reassignment."""

    @pytest.mark.anyio
    async def test_seeded_scenario(self, access):
        with pytest.raises(ForbiddenError, match="in use"):
            await access.delete_role("role-manager")

        await access.users.update("user-demo", UserUpdate(role_id="role-admin"))
        await access.delete_role("role-manager")
        assert "role-manager" not in [r.id for r in await access.roles.list()]

        # Seeded permissions are system permissions
        with pytest.raises(ForbiddenError):
            await access.delete_permission("perm-1")
        assert "user:read" in (await access.roles.get("role-admin")).permissions

    @pytest.mark.anyio
    async def test_scenario_with_custom_permission(self, empty_database):
        async with empty_database.session() as session:
            access = AccessControlService(session)
            permission = await access.permissions.create(
                PermissionCreate(key="user:read", name="View Users")
            )
            admin = await access.roles.create(
                RoleCreate(name="Administrator", permissions=["user:read"], is_system=True)
            )
            manager = await access.roles.create(
                RoleCreate(name="Manager", permissions=["user:read"])
            )
            demo = await access.users.create(
                UserCreate(email="demo@nexus.com", name="Demo", role_id=manager.id)
            )

            with pytest.raises(ForbiddenError):
                await access.delete_role(manager.id)

            await access.users.update(demo.id, UserUpdate(role_id=admin.id))
            await access.delete_role(manager.id)
            await access.delete_permission(permission.id)

            remaining = await access.roles.list()
            assert [r.id for r in remaining] == [admin.id]
            assert remaining[0].permissions == []


class TestCascadeAtomicity:
    """A failure part-way through the cascade leaves nothing applied."""

    @pytest.mark.anyio
    async def test_failed_strip_keeps_permission_and_role_keys(self, access, database, monkeypatch):
        permission = await access.permissions.create(
            PermissionCreate(key="report:export", name="Export Reports")
        )
        role = await access.roles.create(
            RoleCreate(name="Reporter", permissions=["report:export", "blog:read"])
        )
        original_strip = RoleRepository.strip_permission_key

        async def failing_strip(self, key):
            await original_strip(self, key)
            raise RuntimeError("storage failure")

        monkeypatch.setattr(RoleRepository, "strip_permission_key", failing_strip)

        with pytest.raises(RuntimeError, match="storage failure"):
            await access.delete_permission(permission.id)

        async with database.session() as other:
            reloaded = AccessControlService(other)
            assert (await reloaded.permissions.get(permission.id)).key == "report:export"
            assert (await reloaded.roles.get(role.id)).permissions == ["report:export", "blog:read"]


class TestConcurrentFacadeCalls:
    """Overlapping requests each run in their own session on the same store."""

    @staticmethod
    async def _run(database, action):
        async with database.session() as session:
            return await action(AccessControlService(session))

    @pytest.mark.anyio
    async def test_cascade_survives_refused_deletes(self, database):
        for attempt in range(10):
            permission = await self._run(
                database,
                lambda access: access.permissions.create(
                    PermissionCreate(key=f"temp:{attempt}", name="Temporary")
                ),
            )
            await self._run(
                database,
                lambda access: access.roles.update(
                    "role-manager", RoleUpdate(permissions=["user:read", f"temp:{attempt}"])
                ),
            )

            results = await asyncio.gather(
                self._run(database, lambda access: access.delete_permission(permission.id)),
                self._run(database, lambda access: access.delete_role("role-admin")),
                self._run(database, lambda access: access.delete_role("role-admin")),
                return_exceptions=True,
            )

            assert results[0] == ["role-manager"]
            assert all(isinstance(result, ForbiddenError) for result in results[1:])
            async with database.session() as session:
                access = AccessControlService(session)
                assert f"temp:{attempt}" not in [p.key for p in await access.permissions.list()]
                for role in await access.roles.list():
                    assert f"temp:{attempt}" not in role.permissions

    @pytest.mark.anyio
    async def test_role_delete_races_reassignment(self, database):
        role = await self._run(database, lambda access: access.roles.create(RoleCreate(name="Temp")))

        async def reassign(access):
            access.users.references = StrictReferencePolicy(access.session)
            return await access.users.update("user-demo", UserUpdate(role_id=role.id))

        await asyncio.gather(
            self._run(database, lambda access: access.delete_role(role.id)),
            self._run(database, reassign),
            return_exceptions=True,
        )

        async with database.session() as session:
            access = AccessControlService(session)
            demo = await access.users.get("user-demo")
            # Whichever ran first, the user never points at a deleted role
            assert await access.role_repo.get_by_id(demo.role_id) is not None
