"""
Conversions between API decimals and stored integer cents.

Balances are stored as integer cents so that ledger arithmetic is exact
(0.1 + 0.2 != 0.3 in floating point). Requests and responses carry
decimal amounts with at most two fractional digits.
"""

from decimal import Decimal


def to_cents(amount: Decimal) -> int:
    """Convert a decimal amount (at most 2 places) to integer cents."""
    return int(amount.scaleb(2).to_integral_exact())


def from_cents(cents: int) -> Decimal:
    """Convert integer cents to a decimal with exactly 2 places."""
    return Decimal(cents).scaleb(-2)
