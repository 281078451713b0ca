from .access_control_service import AccessControlService
from .blog_registry import BlogRegistry
from .dashboard_service import DashboardService
from .permission_registry import PermissionRegistry
from .role_registry import RoleRegistry
from .user_registry import UserRegistry

__all__ = [
    "AccessControlService",
    "BlogRegistry",
    "DashboardService",
    "PermissionRegistry",
    "RoleRegistry",
    "UserRegistry",
]
