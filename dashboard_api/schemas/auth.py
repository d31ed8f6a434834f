"""Authentication schemas.

Pydantic schemas for registration and login. The bearer token itself is
returned in the X-Authentication-Token response header, not the body.
"""

import re

from pydantic import BaseModel, Field, field_validator

USERNAME_RE = re.compile(r"^[a-zA-Z0-9_.@-]{3,100}$")


class CredentialsRequest(BaseModel):
    """Username and password, for both login and registration."""

    username: str = Field(
        ...,
        min_length=3,
        max_length=100,
        description="Login name (letters, digits, and _ . @ -).",
    )
    password: str = Field(
        ...,
        min_length=1,
        max_length=72,
        description="Account password.",
    )

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        v = v.strip()
        if not USERNAME_RE.match(v):
            msg = "Username may only contain letters, digits, and _ . @ -"
            raise ValueError(msg)
        return v


class RegistrationRequest(CredentialsRequest):
    """Registration request; enforces a minimum password length."""

    password: str = Field(
        ...,
        min_length=8,
        max_length=72,
        description="Password (8-72 characters).",
    )


class AuthenticationResponse(BaseModel):
    """Body returned alongside a freshly issued token."""

    username: str
    authorities: list[str]
    message: str


class ErrorResponse(BaseModel):
    """Error response schema."""

    detail: str = Field(..., description="Error message")
