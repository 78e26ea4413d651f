"""
AccountHub Backend — Registration & User Schemas
==================================================

What:  The registration form and the user read projection.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from accounthub.forms import FormType


class RegistrationForm(FormType):
    """
    Fields submitted to POST /register.

    The password is entered twice; both entries must match.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    username: str = Field(min_length=2, max_length=180)
    email: EmailStr
    plain_password: str = Field(min_length=8, max_length=4096)
    plain_password_confirmation: str

    @field_validator("plain_password_confirmation")
    @classmethod
    def passwords_match(cls, v: str, info: ValidationInfo) -> str:
        password = info.data.get("plain_password")
        if password is not None and v != password:
            raise ValueError("The password fields must match.")
        return v

    def bind_to(self, entity: Any) -> Any:
        entity.username = self.username
        entity.email = str(self.email)
        entity.plain_password = self.plain_password
        return entity


class UserRead(BaseModel):
    """Read-safe projection of a user. Never includes the password hash or token."""

    id: int
    username: str
    email: str
    enabled: bool
    created_at: datetime


class RegistrationResponse(BaseModel):
    message: str = Field(description="Human-readable outcome")
    confirmation_required: bool = Field(
        description="True when the account stays disabled until the mailed link is followed"
    )
    user: UserRead


class CsrfTokenResponse(BaseModel):
    csrf_token: str
