from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ...crud.blog import BlogRepository
from ...database import committing
from ...domain.ports.references import ReferencePolicy
from ...errors import NotFoundError
from ...models.base import utcnow
from ...models.blog_post import BlogPost, BlogStatus
from ...schemas.blog import BlogCreate, BlogRead, BlogUpdate
from ...schemas.common import Page
from ..references import LooseReferencePolicy
from .paging import page_offset

logger = logging.getLogger(__name__)


class BlogRegistry:
    def __init__(self, session: AsyncSession, references: ReferencePolicy | None = None):
        self.session = session
        self.repo = BlogRepository(session)
        self.references = references or LooseReferencePolicy()

    async def list(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        search: str | None = None,
        status: BlogStatus | None = None,
        author_id: str | None = None,
    ) -> Page[BlogRead]:
        """Most recently updated first; ``search`` matches title or content."""
        offset = page_offset(page, limit)
        posts, total = await self.repo.list_page(
            offset=offset,
            limit=limit,
            search=search,
            status=status.value if status is not None else None,
            author_id=author_id,
        )
        return Page[BlogRead](
            data=[BlogRead.model_validate(post) for post in posts],
            total=total,
            page=page,
            limit=limit,
        )

    async def get(self, post_id: str) -> BlogPost:
        post = await self.repo.get_by_id(post_id)
        if post is None:
            raise NotFoundError("Blog not found", details={"blog_id": post_id})
        return post

    async def create(self, data: BlogCreate) -> BlogPost:
        now = utcnow()
        async with committing(self.session):
            await self.references.check_blog_author(data.author_id)
            values = data.model_dump()
            values["status"] = data.status.value
            post = await self.repo.add(BlogPost(**values, created_at=now, updated_at=now))

        logger.info("blog_created blog_id=%s author_id=%s", post.id, post.author_id)
        return post

    async def update(self, post_id: str, patch: BlogUpdate) -> BlogPost:
        async with committing(self.session):
            post = await self.get(post_id)
            changes = patch.model_dump(exclude_unset=True)

            author_id = changes.get("author_id")
            if author_id is not None and author_id != post.author_id:
                await self.references.check_blog_author(author_id)

            for field, value in changes.items():
                if value is None:
                    continue
                if field == "status":
                    value = value.value
                setattr(post, field, value)
            post.updated_at = utcnow()
            await self.session.flush()

        logger.info("blog_updated blog_id=%s fields=%s", post_id, sorted(changes))
        return post

    async def delete(self, post_id: str) -> None:
        async with committing(self.session):
            post = await self.get(post_id)
            await self.repo.delete(post)

        logger.info("blog_deleted blog_id=%s", post_id)
