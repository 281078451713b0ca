from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol


class ReferencePolicy(Protocol):
    """Decides whether cross-entity references must resolve.

    Roles hold permission keys, users hold a role id and posts hold an
    author id. None of these are foreign keys; a policy may still insist
    that they point at something that exists.
    """

    async def check_role_permissions(self, keys: Sequence[str]) -> None:
        ...

    async def check_user_role(self, role_id: str) -> None:
        ...

    async def check_blog_author(self, author_id: str) -> None:
        ...
