from fastapi import APIRouter, Depends, Query, status

from ..dependencies import PageParams, get_access_control, get_page_params
from ..models.blog_post import BlogStatus
from ..schemas.blog import BlogCreate, BlogRead, BlogUpdate
from ..schemas.common import DeleteResponse, Page
from ..services.admin import AccessControlService

router = APIRouter(prefix="/blogs", tags=["blogs"])


@router.get("", response_model=Page[BlogRead])
async def list_blogs(
    search: str | None = Query(None, description="Case-insensitive match on title or content"),
    status_filter: BlogStatus | None = Query(None, alias="status"),
    author_id: str | None = Query(None, alias="authorId"),
    paging: PageParams = Depends(get_page_params),
    access: AccessControlService = Depends(get_access_control),
) -> Page[BlogRead]:
    return await access.blogs.list(
        page=paging.page,
        limit=paging.limit,
        search=search,
        status=status_filter,
        author_id=author_id,
    )


@router.get("/{blog_id}", response_model=BlogRead)
async def get_blog(blog_id: str, access: AccessControlService = Depends(get_access_control)):
    return await access.blogs.get(blog_id)


@router.post("", response_model=BlogRead, status_code=status.HTTP_201_CREATED)
async def create_blog(
    payload: BlogCreate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.blogs.create(payload)


@router.put("/{blog_id}", response_model=BlogRead)
async def update_blog(
    blog_id: str,
    payload: BlogUpdate,
    access: AccessControlService = Depends(get_access_control),
):
    return await access.blogs.update(blog_id, payload)


@router.delete("/{blog_id}", response_model=DeleteResponse)
async def delete_blog(
    blog_id: str,
    access: AccessControlService = Depends(get_access_control),
) -> DeleteResponse:
    await access.blogs.delete(blog_id)
    return DeleteResponse()
