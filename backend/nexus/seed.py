"""
Seed data for a fresh console database.

Seeding only runs against an empty store (no roles), so it is safe to call
on every startup.
"""
import logging
from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .database import committing
from .models import BlogPost, BlogStatus, Permission, Role, User, UserStatus
from .models.base import utcnow

logger = logging.getLogger(__name__)


DEFAULT_PERMISSIONS = [
    # User management
    {"id": "perm-1", "key": "user:read", "name": "View Users", "description": "Can view user lists and details", "group": "User Management"},
    {"id": "perm-2", "key": "user:write", "name": "Edit Users", "description": "Can create and modify users", "group": "User Management"},
    {"id": "perm-3", "key": "user:delete", "name": "Delete Users", "description": "Can remove users", "group": "User Management"},

    # Role management
    {"id": "perm-4", "key": "role:read", "name": "View Roles", "description": "Can view roles and permissions", "group": "Role Management"},
    {"id": "perm-5", "key": "role:write", "name": "Manage Roles", "description": "Can create and modify roles", "group": "Role Management"},

    # System
    {"id": "perm-6", "key": "system:settings", "name": "System Settings", "description": "Access global system configuration", "group": "System"},

    # Blog management
    {"id": "perm-7", "key": "blog:read", "name": "View Blogs", "description": "Can view blog posts", "group": "Blog Management"},
    {"id": "perm-8", "key": "blog:write", "name": "Manage Blogs", "description": "Can create and edit blog posts", "group": "Blog Management"},
]

DEFAULT_ROLES = [
    {
        "id": "role-admin",
        "name": "Administrator",
        "description": "Full system access",
        "permissions": [perm["key"] for perm in DEFAULT_PERMISSIONS],
        "is_system": True,
    },
    {
        "id": "role-manager",
        "name": "Manager",
        "description": "Can manage users but not roles",
        "permissions": ["user:read", "user:write", "user:delete", "blog:read", "blog:write"],
        "is_system": False,
    },
    {
        "id": "role-user",
        "name": "User",
        "description": "Standard access",
        "permissions": ["user:read", "blog:read"],
        "is_system": True,
    },
]

DEFAULT_USERS = [
    {
        "id": "user-admin",
        "email": "admin@nexus.com",
        "name": "System Admin",
        "role_id": "role-admin",
        "avatar_url": "https://picsum.photos/seed/admin/200/200",
        "bio": "Super administrator of the Nexus system.",
    },
    {
        "id": "user-demo",
        "email": "demo@nexus.com",
        "name": "Demo Manager",
        "role_id": "role-manager",
        "avatar_url": "https://picsum.photos/seed/demo/200/200",
        "bio": "Regional manager handling user onboarding.",
    },
]

DEFAULT_BLOGS = [
    {
        "id": "blog-1",
        "title": "Welcome to Nexus",
        "excerpt": "An introduction to our new user management system.",
        "content": (
            "Nexus provides a comprehensive dashboard for managing users, roles, "
            "and permissions."
        ),
        "author_id": "user-admin",
        "status": BlogStatus.PUBLISHED.value,
        "tags": ["system", "update"],
        "age_days": 2,
    },
    {
        "id": "blog-2",
        "title": "Q4 Roadmap",
        "excerpt": "What we are planning for the next quarter.",
        "content": (
            "We are planning to add more AI features, better analytics, and "
            "improved role-based access control granularity."
        ),
        "author_id": "user-demo",
        "status": BlogStatus.DRAFT.value,
        "tags": ["planning", "roadmap"],
        "age_days": 1,
    },
]


async def seed_database(session: AsyncSession) -> bool:
    """Insert the default permissions, roles, users and posts.

    Returns:
        True if data was inserted, False if the store already had roles
    """
    role_count = (await session.execute(select(func.count()).select_from(Role))).scalar_one()
    if role_count:
        logger.info("seed_skipped reason=roles_present count=%d", role_count)
        return False

    now = utcnow()
    async with committing(session):
        for perm in DEFAULT_PERMISSIONS:
            session.add(Permission(**perm, is_system=True, created_at=now))

        for role in DEFAULT_ROLES:
            session.add(Role(**role, created_at=now))

        # The administrator account predates the demo account.
        for offset, user in enumerate(reversed(DEFAULT_USERS)):
            session.add(
                User(
                    **user,
                    status=UserStatus.ACTIVE.value,
                    created_at=now - timedelta(seconds=offset),
                )
            )

        for blog in DEFAULT_BLOGS:
            values = {k: v for k, v in blog.items() if k != "age_days"}
            stamp = now - timedelta(days=blog["age_days"])
            session.add(BlogPost(**values, created_at=stamp, updated_at=stamp))

    logger.info(
        "seed_completed permissions=%d roles=%d users=%d blogs=%d",
        len(DEFAULT_PERMISSIONS),
        len(DEFAULT_ROLES),
        len(DEFAULT_USERS),
        len(DEFAULT_BLOGS),
    )
    return True
