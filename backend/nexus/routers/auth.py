from fastapi import APIRouter, Depends

from ..dependencies import get_user_port
from ..domain.ports.user import UserPort
from ..schemas.auth import LoginRequest
from ..schemas.user import UserRead
from ..use_cases.auth.login_user import login_user

router = APIRouter(tags=["auth"])


@router.post("/login", response_model=UserRead)
async def login(
    payload: LoginRequest,
    user_port: UserPort = Depends(get_user_port),
):
    """Demonstration login: resolves the user by email, no credentials."""
    return await login_user(user_port, payload.email)
