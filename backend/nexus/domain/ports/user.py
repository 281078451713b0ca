from __future__ import annotations

from datetime import datetime
from typing import Protocol


class UserData(Protocol):
    id: str
    email: str
    role_id: str
    status: str
    last_login: datetime | None


class UserPort(Protocol):
    async def get_by_email(self, email: str) -> UserData | None:
        ...

    async def record_login(self, user: UserData) -> UserData:
        ...
