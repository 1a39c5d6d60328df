"""
Pydantic schemas for balance operations and bank-account/profile changes.

Amounts are decimals with at most two fractional digits (e.g. 10.50). The
sign is not checked here: a zero or negative amount reaches the repository
and is rejected there as an invalid amount.
"""

from decimal import Decimal
from typing import Literal

from pydantic import EmailStr, Field

from minibank.schemas.user import Balance, CamelModel, UserResponse


class EmailRequest(CamelModel):
    """Request body for the lookup endpoints (POST /account/find, /findOne)."""
    email: EmailStr


class AmountRequest(CamelModel):
    """Request body for POST /account/deposit and /account/withdraw."""
    email: EmailStr
    amount: Decimal = Field(max_digits=14, decimal_places=2)


class BalanceResponse(CamelModel):
    message: str
    balance: Balance


class CreateBankAccountRequest(CamelModel):
    """Request body for POST /account/createbank."""
    email: EmailStr
    account_type: Literal["checking", "savings"]


class BankAccountResponse(CamelModel):
    message: str
    user: UserResponse


class UpdateProfileRequest(CamelModel):
    """Request body for PUT /account/update-profile."""
    email: EmailStr
    name: str = Field(min_length=1, max_length=255)
    phone_number: str = Field(min_length=1, max_length=32)


class MessageResponse(CamelModel):
    message: str
