"""
Pydantic schemas for account creation, login, and credential updates.

Pydantic validates incoming data automatically: a missing field or a
malformed email is rejected with 400 before any handler code runs.
"""

from pydantic import EmailStr, Field

from minibank.schemas.user import CamelModel, UserResponse, UserSummary


class CreateAccountRequest(CamelModel):
    """Request body for POST /account/create."""
    name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(min_length=1)


class CreateAccountResponse(CamelModel):
    message: str
    user: UserResponse


class LoginRequest(CamelModel):
    """Request body for POST /account/login."""
    email: EmailStr
    password: str


class LoginResponse(CamelModel):
    """Login body; the JWT travels in the Authorization response header."""
    message: str
    user: UserSummary


class UpdateUserRequest(CamelModel):
    """Request body for POST /account/update. Omitted fields are left alone."""
    email: EmailStr
    name: str | None = Field(None, min_length=1, max_length=255)
    password: str | None = Field(None, min_length=1)


class UpdateUserResponse(CamelModel):
    message: str
    user: UserResponse
