"""API models for the password reset endpoint."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field
from pydantic.alias_generators import to_camel


class PasswordResetRequest(BaseModel):
    """Request a reset link (``action="request"``) or apply a reset (``"reset"``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    email: EmailStr
    action: str = Field(..., description="request or reset")
    token: str | None = None
    new_password: str | None = None


class PasswordResetResponse(BaseModel):
    success: bool = True
    message: str
