from .base import Base
from .blog_post import BlogPost, BlogStatus
from .permission import Permission
from .role import Role
from .user import User, UserStatus

__all__ = [
    "Base",
    "Permission",
    "Role",
    "User",
    "UserStatus",
    "BlogPost",
    "BlogStatus",
]
