from pydantic import Field

from teamsite.models.fields import ApiModel, RequestModel


class LoginRequest(RequestModel):
    password: str = Field(default="")


class LoginResponse(ApiModel):
    token: str
    expires_in_ms: int
