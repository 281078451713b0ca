"""User records, paginated search and the login side effect."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.role import RoleRepository
from ...crud.user import UserRepository
from ...database import committing
from ...domain.ports.references import ReferencePolicy
from ...errors import NotFoundError
from ...models.base import utcnow
from ...models.user import User
from ...schemas.common import Page
from ...schemas.user import UserCreate, UserDetail, UserRead, UserUpdate
from ..references import LooseReferencePolicy
from .paging import page_offset

logger = logging.getLogger(__name__)

NULLABLE_FIELDS = frozenset({"avatar_url", "bio"})


class UserRegistry:
    def __init__(self, session: AsyncSession, references: ReferencePolicy | None = None):
        self.session = session
        self.repo = UserRepository(session)
        self.role_repo = RoleRepository(session)
        self.references = references or LooseReferencePolicy()

    async def list(self, *, page: int = 1, limit: int = 10, search: str | None = None) -> Page[UserRead]:
        """Newest users first; ``search`` matches name or email, case-insensitively."""
        offset = page_offset(page, limit)
        users, total = await self.repo.list_page(offset=offset, limit=limit, search=search)
        return Page[UserRead](
            data=[UserRead.model_validate(user) for user in users],
            total=total,
            page=page,
            limit=limit,
        )

    async def get(self, user_id: str) -> User:
        user = await self.repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found", details={"user_id": user_id})
        return user

    async def detail(self, user_id: str) -> UserDetail:
        user = await self.get(user_id)
        names = await self.role_names([user])
        return UserDetail.model_validate(user).model_copy(
            update={"role_name": names.get(user.role_id)}
        )

    async def role_names(self, users: Iterable[User]) -> dict[str, str]:
        return await self.role_repo.names_by_id({user.role_id for user in users})

    async def get_by_email(self, email: str) -> User | None:
        matches = await self.repo.find_by_email(email)
        if not matches:
            return None
        if len(matches) > 1:
            logger.warning(
                "duplicate_email matches=%d chosen_user_id=%s", len(matches), matches[0].id
            )
        return matches[0]

    async def create(self, data: UserCreate) -> User:
        async with committing(self.session):
            await self.role_repo.get_by_id(data.role_id, for_update=True)
            await self.references.check_user_role(data.role_id)
            values = data.model_dump()
            values["status"] = data.status.value
            user = await self.repo.add(User(**values))

        logger.info("user_created user_id=%s role_id=%s", user.id, user.role_id)
        return user

    async def update(self, user_id: str, patch: UserUpdate) -> User:
        async with committing(self.session):
            user = await self.get(user_id)
            changes = patch.model_dump(exclude_unset=True)

            role_id = changes.get("role_id")
            if role_id is not None and role_id != user.role_id:
                # Serialises with delete_role on the target role
                await self.role_repo.get_by_id(role_id, for_update=True)
                await self.references.check_user_role(role_id)

            for field, value in changes.items():
                if value is None and field not in NULLABLE_FIELDS:
                    continue
                if field == "status":
                    value = value.value
                setattr(user, field, value)
            await self.session.flush()

        logger.info("user_updated user_id=%s fields=%s", user_id, sorted(changes))
        return user

    async def record_login(self, user: User) -> User:
        async with committing(self.session):
            user.last_login = utcnow()
            await self.session.flush()
        return user

    async def delete(self, user_id: str) -> None:
        async with committing(self.session):
            user = await self.get(user_id)
            await self.repo.delete(user)

        logger.info("user_deleted user_id=%s", user_id)
