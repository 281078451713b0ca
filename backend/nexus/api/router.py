from fastapi import APIRouter

from ..routers import auth, blogs, dashboard, permissions, roles, users

router = APIRouter(prefix="/api")

_routers = [
    auth.router,
    permissions.router,
    roles.router,
    users.router,
    blogs.router,
    dashboard.router,
]

for _router in _routers:
    router.include_router(_router)
