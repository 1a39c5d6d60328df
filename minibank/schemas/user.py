"""
Pydantic schemas for user records in responses.

Notice that hashed_password is NEVER included in any response schema.
This is a critical security boundary.

Field names are camelCase on the wire (accountNumber, phoneNumber, ...),
matching the browser client; snake_case is accepted on input too.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

from minibank.models.user import User
from minibank.money import from_cents


# Balances stay exact Decimals in Python and go out as JSON numbers
Balance = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    """Base for every minibank request/response body."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserResponse(CamelModel):
    """Public representation of a user record (never includes the password hash)."""
    id: uuid.UUID
    name: str
    email: str
    balance: Balance
    account_type: str
    account_number: str
    phone_number: str | None
    role: str
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            balance=from_cents(user.balance_cents),
            account_type=user.account_type,
            account_number=user.account_number,
            phone_number=user.phone_number,
            role=user.role.value,
            created_at=user.created_at,
        )


class UserSummary(CamelModel):
    """The identity fields echoed back after login."""
    email: str
    name: str
