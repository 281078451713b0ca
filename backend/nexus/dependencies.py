from collections.abc import AsyncGenerator
from dataclasses import dataclass

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings
from .database import Database
from .domain.ports.references import ReferencePolicy
from .domain.ports.user import UserPort
from .errors import ValidationError
from .services.admin import AccessControlService, DashboardService
from .services.admin.user_registry import UserRegistry
from .services.references import build_reference_policy


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    return request.app.state.database


async def get_db(
    database: Database = Depends(get_database),
) -> AsyncGenerator[AsyncSession, None]:
    async with database.session() as session:
        yield session


def get_reference_policy(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings_dep),
) -> ReferencePolicy:
    return build_reference_policy(db, strict=settings.strict_references)


def get_access_control(
    db: AsyncSession = Depends(get_db),
    references: ReferencePolicy = Depends(get_reference_policy),
) -> AccessControlService:
    return AccessControlService(db, references)


def get_user_port(db: AsyncSession = Depends(get_db)) -> UserPort:
    return UserRegistry(db)


def get_dashboard_service(db: AsyncSession = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int


def get_page_params(
    page: int = Query(1, ge=1, description="1-based page number"),
    limit: int | None = Query(None, ge=1, description="Results per page"),
    settings: Settings = Depends(get_settings_dep),
) -> PageParams:
    if limit is None:
        limit = settings.default_page_size
    if limit > settings.max_page_size:
        raise ValidationError(
            f"limit must not exceed {settings.max_page_size}",
            details={"limit": limit, "max": settings.max_page_size},
        )
    return PageParams(page=page, limit=limit)
