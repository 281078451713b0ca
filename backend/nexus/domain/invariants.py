"""
Access-control invariants.

Every check here runs BEFORE any write and raises an ``AppError`` subclass
that the API layer renders directly. Violations are logged once, at the
point of rejection.

INVARIANTS:
1. System roles and system permissions are never deleted
2. A role referenced by any user's role_id is never deleted
3. Permission keys are unique
4. Only ACTIVE users may log in
"""

import logging
from enum import Enum
from typing import Any, NoReturn

from ..errors import DuplicateKeyError, ForbiddenError
from ..models.user import UserStatus

logger = logging.getLogger(__name__)


class RoleDeletability(str, Enum):
    DELETABLE = "DELETABLE"
    BLOCKED_SYSTEM = "BLOCKED_SYSTEM"
    BLOCKED_IN_USE = "BLOCKED_IN_USE"


def _reject(error: ForbiddenError | DuplicateKeyError, invariant: str, **details: Any) -> NoReturn:
    logger.warning(
        "invariant_violation invariant=%s message=%s %s",
        invariant,
        error.message,
        " ".join(f"{k}={v}" for k, v in details.items()),
    )
    raise error


def role_deletability(*, is_system: bool, assigned_users: int) -> RoleDeletability:
    """
    Deletability state of a role.

    ``BLOCKED_SYSTEM`` is permanent and takes precedence; ``BLOCKED_IN_USE``
    lasts while at least one user references the role.
    """
    if is_system:
        return RoleDeletability.BLOCKED_SYSTEM
    if assigned_users > 0:
        return RoleDeletability.BLOCKED_IN_USE
    return RoleDeletability.DELETABLE


def ensure_role_deletable(role_id: str, *, is_system: bool, assigned_users: int) -> None:
    """
    Raises:
        ForbiddenError: If the role is a system role or still assigned
    """
    state = role_deletability(is_system=is_system, assigned_users=assigned_users)
    if state is RoleDeletability.BLOCKED_SYSTEM:
        _reject(
            ForbiddenError(
                "Cannot delete system role",
                details={"role_id": role_id, "reason": state.value},
            ),
            "role.system_protected",
            role_id=role_id,
        )
    if state is RoleDeletability.BLOCKED_IN_USE:
        _reject(
            ForbiddenError(
                "Cannot delete role in use",
                details={
                    "role_id": role_id,
                    "reason": state.value,
                    "assigned_users": assigned_users,
                },
            ),
            "role.in_use",
            role_id=role_id,
            assigned_users=assigned_users,
        )


def ensure_permission_deletable(permission_id: str, *, key: str, is_system: bool) -> None:
    """
    Raises:
        ForbiddenError: If the permission is a system permission
    """
    if is_system:
        _reject(
            ForbiddenError(
                "Cannot delete system permission",
                details={"permission_id": permission_id, "key": key},
            ),
            "permission.system_protected",
            permission_id=permission_id,
            key=key,
        )


def ensure_permission_key_free(key: str, *, existing_id: str | None) -> None:
    """
    Raises:
        DuplicateKeyError: If another permission already uses ``key``
    """
    if existing_id is not None:
        _reject(
            DuplicateKeyError(
                f'Permission key "{key}" already exists.',
                details={"key": key, "existing_id": existing_id},
            ),
            "permission.unique_key",
            key=key,
            existing_id=existing_id,
        )


def ensure_can_login(user_id: str, status: str) -> None:
    """
    Raises:
        ForbiddenError: If the user is not ACTIVE
    """
    if status != UserStatus.ACTIVE.value:
        _reject(
            ForbiddenError(
                "User is not active",
                details={"user_id": user_id, "status": status},
            ),
            "login.active_only",
            user_id=user_id,
            status=status,
        )
