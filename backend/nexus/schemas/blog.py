from datetime import datetime

from pydantic import Field

from ..models.blog_post import BlogStatus
from .common import ApiModel


class BlogBase(ApiModel):
    title: str = Field(..., min_length=1, max_length=500)
    excerpt: str = ""
    content: str = ""
    author_id: str = Field(..., min_length=1, max_length=64)
    status: BlogStatus = BlogStatus.DRAFT
    tags: list[str] = Field(default_factory=list)


class BlogCreate(BlogBase):
    pass


class BlogUpdate(ApiModel):
    title: str | None = Field(None, min_length=1, max_length=500)
    excerpt: str | None = None
    content: str | None = None
    author_id: str | None = Field(None, min_length=1, max_length=64)
    status: BlogStatus | None = None
    tags: list[str] | None = None


class BlogRead(BlogBase):
    id: str
    created_at: datetime
    updated_at: datetime
