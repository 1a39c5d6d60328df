"""
User model: the single persisted record.

One row holds a customer's identity, credentials, and their one bank
account (number, type, balance). There is deliberately no separate
accounts table: every balance operation addresses the user by email.

Roles:
  - USER: Bank customer, the default for every created account
  - ADMIN: System administrator
  - BANK_EMPLOYEE: Staff member who, like ADMIN, may list all records

Balance:
  Stored as integer cents. A CHECK constraint keeps it non-negative as a
  final safety net under the conditional update used by withdrawals.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from minibank.database import Base


class Role(str, enum.Enum):
    """
    Role a user holds within the bank.

    Inherits from str so the value serializes naturally to JSON.
    """
    USER = "user"
    ADMIN = "admin"
    BANK_EMPLOYEE = "bank employee"


class AccountType(str, enum.Enum):
    CHECKING = "checking"
    SAVINGS = "savings"


class User(Base):
    __tablename__ = "users"

    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_users_non_negative_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Email is the lookup key for every operation
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )

    # Argon2 hash of the password (never plaintext)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)

    balance_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    account_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=AccountType.CHECKING.value,
    )

    # Random 10-digit account number, reassigned by create-bank-account
    account_number: Mapped[str] = mapped_column(
        String(10),
        unique=True,
        nullable=False,
    )

    # Collected by the profile form, not at signup
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)

    role: Mapped[Role] = mapped_column(
        Enum(Role),
        default=Role.USER,
        nullable=False,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
