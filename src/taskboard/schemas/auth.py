"""Pydantic schemas for registration, login and the user resource.

Separate request schemas (input) from Read schemas (output). UserRead is
the only shape a User is ever serialized through, so the password hash
cannot leak.
"""

from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator

from taskboard.auth.tokens import TOKEN_TYPE
from taskboard.schemas.common import UTCDateTime


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=6)
    password_confirmation: str

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if len(v) > 255:
            raise ValueError("The email may not be greater than 255 characters.")
        return v.lower()

    @field_validator("password_confirmation")
    @classmethod
    def confirm_password(cls, v: str, info: ValidationInfo) -> str:
        password = info.data.get("password")
        if password is not None and v != password:
            raise ValueError("The password confirmation does not match.")
        return v


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.strip().lower()


class UserRead(BaseModel):
    id: int
    name: str
    email: str
    created_at: UTCDateTime
    updated_at: UTCDateTime

    model_config = {"from_attributes": True}


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = TOKEN_TYPE


class RegisterResponse(TokenResponse):
    """Registration returns the new user plus a first token."""

    data: UserRead
