from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.blog_post import BlogPost


def _search_clause(search: str):
    return or_(
        BlogPost.title.icontains(search, autoescape=True),
        BlogPost.content.icontains(search, autoescape=True),
    )


class BlogRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def add(self, post: BlogPost) -> BlogPost:
        self.session.add(post)
        await self.session.flush()
        await self.session.refresh(post)
        return post

    async def get_by_id(self, post_id: str) -> BlogPost | None:
        return await self.session.get(BlogPost, post_id)

    async def list_page(
        self,
        *,
        offset: int,
        limit: int,
        search: str | None = None,
        status: str | None = None,
        author_id: str | None = None,
    ) -> tuple[list[BlogPost], int]:
        conditions = []
        if search:
            conditions.append(_search_clause(search))
        if status:
            conditions.append(BlogPost.status == status)
        if author_id:
            conditions.append(BlogPost.author_id == author_id)

        count_query = select(func.count()).select_from(BlogPost).where(*conditions)
        total = int((await self.session.execute(count_query)).scalar_one())
        result = await self.session.execute(
            select(BlogPost)
            .where(*conditions)
            .order_by(BlogPost.updated_at.desc(), BlogPost.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), total

    async def count(self, *, status: str | None = None) -> int:
        query = select(func.count()).select_from(BlogPost)
        if status:
            query = query.where(BlogPost.status == status)
        return int((await self.session.execute(query)).scalar_one())

    async def delete(self, post: BlogPost) -> None:
        await self.session.delete(post)
        await self.session.flush()
