"""
Account router: every customer-facing endpoint, mounted at /account.

Account lifecycle:
  POST /account/create          — Register a user with a checking account
  POST /account/login           — Verify a password, return a JWT header
  POST /account/update          — Change name and/or password
  PUT  /account/update-profile  — Change name and phone number
  POST /account/createbank      — Assign a new account number and type

Balance operations:
  POST /account/deposit         — Add an amount to the balance
  POST /account/withdraw        — Remove an amount if the balance covers it
  GET  /account/balance/{email} — Current balance

Lookups:
  POST /account/find            — Users matching an email (as a list)
  POST /account/findOne         — The user matching an email
  GET  /account/profile         — The user matching ?email=
  GET  /account/data            — Same as /profile
  GET  /account/all             — Every user (staff token required)

Handlers only translate: validation happens in the schemas, rules in the
repository, and errors become responses in the registered exception
handlers.
"""

from fastapi import APIRouter, Depends, Query, Response, status
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from minibank.database import get_db
from minibank.dependencies import require_staff
from minibank.exceptions import UserNotFoundError
from minibank.models.user import User
from minibank.money import from_cents, to_cents
from minibank.schemas.account import (
    AmountRequest,
    BalanceResponse,
    BankAccountResponse,
    CreateBankAccountRequest,
    EmailRequest,
    MessageResponse,
    UpdateProfileRequest,
)
from minibank.schemas.auth import (
    CreateAccountRequest,
    CreateAccountResponse,
    LoginRequest,
    LoginResponse,
    UpdateUserRequest,
    UpdateUserResponse,
)
from minibank.schemas.user import UserResponse, UserSummary
from minibank.services import auth_service, user_repository

router = APIRouter()


# ---------------------------------------------------------------------------
# Account lifecycle
# ---------------------------------------------------------------------------

@router.post(
    "/create",
    response_model=CreateAccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user account",
)
async def create_account(
    request: CreateAccountRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Register a new user.

    The user starts with a zero balance, a checking account, and a randomly
    generated 10-digit account number. Returns 409 if the email is taken.
    """
    user = await auth_service.create_account(
        db=db,
        name=request.name,
        email=request.email,
        password=request.password,
    )
    return CreateAccountResponse(
        message="Account successfully created",
        user=UserResponse.from_user(user),
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate and get a token",
)
async def login(
    request: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
):
    """
    Authenticate with email and password.

    The JWT is returned in the response header, valid for
    ACCESS_TOKEN_EXPIRE_MINUTES (default: 60):

        Authorization: Bearer <token>
    """
    user, token = await auth_service.login(
        db=db,
        email=request.email,
        password=request.password,
    )
    response.headers["Authorization"] = f"Bearer {token}"
    return LoginResponse(
        message="Login successful",
        user=UserSummary(email=user.email, name=user.name),
    )


@router.post(
    "/update",
    response_model=UpdateUserResponse,
    summary="Update name and/or password",
)
async def update_user(
    request: UpdateUserRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Change the name and/or password. With neither given, the current
    record is returned unchanged.
    """
    user = await auth_service.update_user(
        db=db,
        email=request.email,
        name=request.name,
        password=request.password,
    )
    if user is None:
        raise UserNotFoundError(request.email)
    return UpdateUserResponse(
        message="User information updated successfully",
        user=UserResponse.from_user(user),
    )


@router.put(
    "/update-profile",
    response_model=MessageResponse,
    summary="Update name and phone number",
)
async def update_profile(
    request: UpdateProfileRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await user_repository.update_by_email(
        db,
        request.email,
        {"name": request.name, "phone_number": request.phone_number},
    )
    if user is None:
        raise UserNotFoundError(request.email)
    return MessageResponse(message="Profile updated successfully")


@router.post(
    "/createbank",
    response_model=BankAccountResponse,
    summary="Create (or replace) the user's bank account",
)
async def create_bank_account(
    request: CreateBankAccountRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Assign a fresh account number with the requested type.

    A previous account number is replaced; the balance is kept. A number
    claimed concurrently by another request is re-drawn, and 409 is returned
    only if every draw collides that way.
    """
    user = await user_repository.create_or_replace_bank_account(
        db, request.email, request.account_type
    )
    return BankAccountResponse(
        message="Bank account created successfully",
        user=UserResponse.from_user(user),
    )


# ---------------------------------------------------------------------------
# Balance operations
# ---------------------------------------------------------------------------

@router.post(
    "/deposit",
    response_model=BalanceResponse,
    summary="Deposit into an account",
)
async def deposit(
    request: AmountRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Add `amount` to the balance. Amounts must be greater than zero.
    """
    user = await user_repository.deposit(db, request.email, to_cents(request.amount))
    return BalanceResponse(
        message="Deposit successful",
        balance=from_cents(user.balance_cents),
    )


@router.post(
    "/withdraw",
    response_model=BalanceResponse,
    summary="Withdraw from an account",
)
async def withdraw(
    request: AmountRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Remove `amount` from the balance.

    Both an unknown email and an insufficient balance answer 404; the
    `error_type` field in the body tells them apart.
    """
    user = await user_repository.withdraw(db, request.email, to_cents(request.amount))
    return BalanceResponse(
        message="Withdrawal successful",
        balance=from_cents(user.balance_cents),
    )


@router.get(
    "/balance/{email}",
    response_model=BalanceResponse,
    summary="Check a balance",
)
async def get_balance(
    email: str,
    db: AsyncSession = Depends(get_db),
):
    user = await user_repository.find_by_email(db, email)
    return BalanceResponse(
        message="Balance retrieval successful",
        balance=from_cents(user.balance_cents),
    )


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------

@router.post(
    "/find",
    response_model=list[UserResponse],
    summary="Find users by email",
)
async def find_users(
    request: EmailRequest,
    db: AsyncSession = Depends(get_db),
):
    users = await user_repository.find_many_by_email(db, request.email)
    if not users:
        raise UserNotFoundError(request.email)
    return [UserResponse.from_user(user) for user in users]


@router.post(
    "/findOne",
    response_model=UserResponse,
    summary="Find one user by email",
)
async def find_one_user(
    request: EmailRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await user_repository.find_by_email(db, request.email)
    return UserResponse.from_user(user)


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get a user's profile",
)
@router.get(
    "/data",
    response_model=UserResponse,
    summary="Get a user's data",
)
async def get_profile(
    email: EmailStr = Query(..., description="Email of the profile to fetch"),
    db: AsyncSession = Depends(get_db),
):
    user = await user_repository.find_by_email(db, email)
    return UserResponse.from_user(user)


@router.get(
    "/all",
    response_model=list[UserResponse],
    summary="[Staff] List all users",
    tags=["Staff"],
)
async def list_all_users(
    staff: User = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
):
    """
    [STAFF ONLY] List every user record, oldest first.

    Requires the bearer token of an admin or bank employee.
    """
    users = await user_repository.list_users(db)
    return [UserResponse.from_user(user) for user in users]
