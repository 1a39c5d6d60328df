"""
Domain exceptions and the FastAPI handlers that translate them.

The repository and service layers raise these without importing any HTTP
concepts; register_exception_handlers() maps each one to a status code and a
consistent JSON body: {"detail": "...", "error_type": "..."}

Exception hierarchy:
    BankAPIError (base)
    ├── UserNotFoundError            — no record matches the email
    ├── AlreadyExistsError           — duplicate email or account number on create
    ├── InvalidAmountError           — deposit/withdraw amount not positive
    ├── InsufficientFundsError       — withdrawal exceeds the balance
    ├── AuthenticationFailedError    — password did not verify
    ├── InvalidUpdateError           — update names a field that can't be merged
    ├── AccountNumberExhaustedError  — no free account number after N draws
    └── StoreUnavailableError        — connection or query failure in the store

Withdrawal failures keep the legacy contract of answering 404 for both a
missing user and insufficient funds; clients tell them apart by error_type.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class BankAPIError(Exception):
    """Base exception for all minibank domain errors."""

    status_code = 500
    error_type = "internal_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class UserNotFoundError(BankAPIError):
    """Raised when no user record matches the given email."""

    status_code = 404
    error_type = "user_not_found"

    def __init__(self, email: str):
        self.email = email
        super().__init__("User not found")


class AlreadyExistsError(BankAPIError):
    """Raised when creating a record whose email or account number is taken."""

    status_code = 409
    error_type = "already_exists"

    def __init__(self, email: str):
        self.email = email
        super().__init__("User already exists")


class InvalidAmountError(BankAPIError):
    """Raised when a deposit or withdrawal amount is zero or negative."""

    status_code = 400
    error_type = "invalid_amount"

    def __init__(self, amount_cents: int):
        self.amount_cents = amount_cents
        super().__init__("Amount must be greater than zero")


class InsufficientFundsError(BankAPIError):
    """
    Raised when a withdrawal would take the balance below zero.

    Attributes:
        email: The account holder's email.
        requested_cents: The amount the user tried to withdraw.
    """

    status_code = 404
    error_type = "insufficient_funds"

    def __init__(self, email: str, requested_cents: int):
        self.email = email
        self.requested_cents = requested_cents
        super().__init__("Insufficient funds")


class AuthenticationFailedError(BankAPIError):
    """Raised when the supplied password does not match the stored hash."""

    status_code = 401
    error_type = "authentication_failed"

    def __init__(self):
        super().__init__("Authentication failed")


class InvalidUpdateError(BankAPIError):
    """Raised when an update names fields that are unknown or protected."""

    status_code = 400
    error_type = "invalid_update"

    def __init__(self, fields: set[str]):
        self.fields = fields
        super().__init__(f"Fields cannot be updated: {', '.join(sorted(fields))}")


class AccountNumberExhaustedError(BankAPIError):
    """Raised when every random draw for an account number was already taken."""

    error_type = "account_number_exhausted"

    def __init__(self, attempts: int):
        self.attempts = attempts
        super().__init__("Failed to generate a unique account number")


class StoreUnavailableError(BankAPIError):
    """Raised when the record store cannot be reached or a query fails."""

    error_type = "store_unavailable"

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__("Internal server error")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the domain and validation exception handlers on the app.

    Called once from create_app() in main.py.
    """

    @app.exception_handler(BankAPIError)
    async def bank_api_error_handler(
        request: Request, exc: BankAPIError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error_type": exc.error_type},
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        # Malformed payloads (bad email, non-numeric amount) are client errors
        return JSONResponse(
            status_code=400,
            content={
                "detail": jsonable_encoder(exc.errors()),
                "error_type": "validation_error",
            },
        )
