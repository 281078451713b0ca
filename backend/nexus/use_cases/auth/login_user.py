import logging

from ...domain.invariants import ensure_can_login
from ...domain.ports.user import UserData, UserPort
from ...errors import NotFoundError

logger = logging.getLogger(__name__)


async def login_user(user_port: UserPort, email: str) -> UserData:
    """Look a user up by email and stamp ``last_login``.

    There is no credential check of any kind: this is a demonstration
    login, not an authentication boundary.

    Raises:
        NotFoundError: If no user has this email
        ForbiddenError: If the user is not ACTIVE
    """
    user = await user_port.get_by_email(email)
    if user is None:
        logger.info("login_rejected reason=unknown_email")
        raise NotFoundError("User not found")

    ensure_can_login(user.id, user.status)

    user = await user_port.record_login(user)
    logger.info("login_succeeded user_id=%s", user.id)
    return user
