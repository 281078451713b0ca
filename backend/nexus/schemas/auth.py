from pydantic import Field

from .common import ApiModel


class LoginRequest(ApiModel):
    email: str = Field(..., min_length=1, max_length=320)
