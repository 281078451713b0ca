"""Reference policies for the loose cross-entity links."""
import logging
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from ..crud.permission import PermissionRepository
from ..crud.role import RoleRepository
from ..crud.user import UserRepository
from ..errors import ValidationError

logger = logging.getLogger(__name__)


class LooseReferencePolicy:
    """Accepts any reference; stale or not-yet-defined targets are allowed."""

    async def check_role_permissions(self, keys: Sequence[str]) -> None:
        return None

    async def check_user_role(self, role_id: str) -> None:
        return None

    async def check_blog_author(self, author_id: str) -> None:
        return None


class StrictReferencePolicy:
    """Rejects references that do not resolve to an existing record."""

    def __init__(self, session: AsyncSession):
        self.permission_repo = PermissionRepository(session)
        self.role_repo = RoleRepository(session)
        self.user_repo = UserRepository(session)

    async def check_role_permissions(self, keys: Sequence[str]) -> None:
        known = await self.permission_repo.existing_keys(list(keys))
        unknown = [key for key in keys if key not in known]
        if unknown:
            logger.warning("reference_rejected kind=permission_keys unknown=%s", unknown)
            raise ValidationError(
                "Unknown permission keys",
                details={"unknown_keys": unknown},
            )

    async def check_user_role(self, role_id: str) -> None:
        if await self.role_repo.get_by_id(role_id) is None:
            logger.warning("reference_rejected kind=role role_id=%s", role_id)
            raise ValidationError("Unknown role", details={"role_id": role_id})

    async def check_blog_author(self, author_id: str) -> None:
        if await self.user_repo.get_by_id(author_id) is None:
            logger.warning("reference_rejected kind=author author_id=%s", author_id)
            raise ValidationError("Unknown author", details={"author_id": author_id})


def build_reference_policy(session: AsyncSession, *, strict: bool):
    if strict:
        return StrictReferencePolicy(session)
    return LooseReferencePolicy()
