"""
User record repository: every read and write of the users table.

THIS IS WHERE BALANCES CHANGE. It handles:
  - Creating user records (with a fresh account number)
  - Lookups by email (single, many, all)
  - Field-level merges for profile and bank-account updates
  - Deposits and withdrawals

Atomicity:
  Each balance change is ONE conditional UPDATE statement. A deposit is
  "balance = balance + amount WHERE email = ?"; a withdrawal adds
  "AND balance >= amount" and inspects the affected row count. There is no
  read-then-write window, so two concurrent withdrawals of the full balance
  cannot both succeed: the second one matches zero rows.

Not-found signaling:
  Lookups raise UserNotFoundError. update_by_email is the one exception: it
  returns None when no row changed, and its callers decide what that means.

All amounts are integer cents.
"""

import random

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from minibank.config import settings
from minibank.database import translate_store_errors
from minibank.exceptions import (
    AccountNumberExhaustedError,
    AlreadyExistsError,
    InsufficientFundsError,
    InvalidAmountError,
    InvalidUpdateError,
    UserNotFoundError,
)
from minibank.logging_config import get_logger
from minibank.models.user import AccountType, Role, User

logger = get_logger(__name__)

# Balance, email and role only change through their dedicated operations
UPDATABLE_FIELDS = frozenset(
    {"name", "hashed_password", "phone_number", "account_type", "account_number"}
)


# ---------------------------------------------------------------------------
# Account numbers
# ---------------------------------------------------------------------------

def generate_account_number() -> str:
    """Draw a random 10-digit account number (no leading zero)."""
    return str(random.randint(1_000_000_000, 9_999_999_999))


async def allocate_account_number(
    db: AsyncSession,
    max_attempts: int | None = None,
) -> str:
    """
    Draw account numbers until one isn't already assigned.

    The unique constraint on users.account_number still backs this up if a
    concurrent request claims the same number in between.

    Raises:
        AccountNumberExhaustedError: If every draw collided.
    """
    attempts = max_attempts or settings.ACCOUNT_NUMBER_MAX_ATTEMPTS

    with translate_store_errors("allocate_account_number"):
        for _ in range(attempts):
            account_number = generate_account_number()
            taken = await db.scalar(
                select(User.id).where(User.account_number == account_number)
            )
            if taken is None:
                return account_number

    logger.error(
        "No free account number after %d draws",
        attempts,
        extra={"action": "allocate_account_number", "error_type": "account_number_exhausted"},
    )
    raise AccountNumberExhaustedError(attempts)


# ---------------------------------------------------------------------------
# Create / read
# ---------------------------------------------------------------------------

async def create_user(
    db: AsyncSession,
    name: str,
    email: str,
    hashed_password: str,
    account_number: str,
    account_type: str = AccountType.CHECKING.value,
) -> User:
    """
    Insert a new user record with a zero balance and the USER role.

    Raises:
        AlreadyExistsError: If the email or account number is already taken.
    """
    with translate_store_errors("create_user"):
        existing = await db.scalar(select(User.id).where(User.email == email))
        if existing is not None:
            logger.info(
                "Rejected duplicate user",
                extra={"action": "create_user", "resource": email, "error_type": "already_exists"},
            )
            raise AlreadyExistsError(email)

        user = User(
            name=name,
            email=email,
            hashed_password=hashed_password,
            account_number=account_number,
            account_type=account_type,
            phone_number=None,
            balance_cents=0,
            role=Role.USER,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race on email or account number
            await db.rollback()
            raise AlreadyExistsError(email) from None

    logger.info("User created", extra={"action": "create_user", "resource": email})
    return user


async def find_by_email(db: AsyncSession, email: str) -> User:
    """
    Get the single user with this email.

    Raises:
        UserNotFoundError: If no record matches.
    """
    with translate_store_errors("find_by_email"):
        user = await db.scalar(select(User).where(User.email == email))

    if user is None:
        raise UserNotFoundError(email)
    return user


async def find_many_by_email(db: AsyncSession, email: str) -> list[User]:
    """All users with this email; at most one, since email is unique."""
    with translate_store_errors("find_many_by_email"):
        result = await db.execute(
            select(User).where(User.email == email).order_by(User.created_at)
        )
    return list(result.scalars().all())


async def list_users(db: AsyncSession) -> list[User]:
    with translate_store_errors("list_users"):
        result = await db.execute(select(User).order_by(User.created_at))
    return list(result.scalars().all())


async def _reload(db: AsyncSession, email: str) -> User:
    # populate_existing refreshes any copy already in the identity map,
    # which a bulk UPDATE leaves stale
    result = await db.execute(
        select(User)
        .where(User.email == email)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------

async def update_by_email(
    db: AsyncSession,
    email: str,
    fields: dict,
) -> User | None:
    """
    Merge `fields` into the user's record.

    Keys must be in UPDATABLE_FIELDS; None values are skipped. The update is
    all-or-nothing.

    The row count the driver reports is the number of rows MATCHED by the
    WHERE clause, not the number whose values differ. Writing values the
    record already holds therefore still returns the record.

    Returns:
        The updated User if exactly one row matched, otherwise None.

    Raises:
        InvalidUpdateError: If any key is unknown or protected.
        AlreadyExistsError: If a new account number collides with another user.
    """
    rejected = set(fields) - UPDATABLE_FIELDS
    if rejected:
        raise InvalidUpdateError(rejected)

    values = {key: value for key, value in fields.items() if value is not None}
    if not values:
        return None

    with translate_store_errors("update_user"):
        try:
            result = await db.execute(
                update(User)
                .where(User.email == email)
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        except IntegrityError:
            await db.rollback()
            raise AlreadyExistsError(email) from None

        if result.rowcount != 1:
            logger.info(
                "No user updated",
                extra={"action": "update_user", "resource": email},
            )
            return None

        user = await _reload(db, email)

    logger.info(
        "User updated: %s",
        ", ".join(sorted(values)),
        extra={"action": "update_user", "resource": email},
    )
    return user


async def create_or_replace_bank_account(
    db: AsyncSession,
    email: str,
    account_type: str,
) -> User:
    """
    Give the user a fresh account number and set its type.

    Any previous account number is replaced; the balance carries over. If
    another request claims the drawn number between allocation and the
    write, the unique constraint rejects it and a new number is drawn.

    Raises:
        InvalidUpdateError: If account_type isn't "checking" or "savings".
        UserNotFoundError: If no record matches.
        AlreadyExistsError: If every draw lost a race for its number.
    """
    try:
        account_type = AccountType(account_type).value
    except ValueError:
        raise InvalidUpdateError({"account_type"}) from None

    attempts = settings.ACCOUNT_NUMBER_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        account_number = await allocate_account_number(db)
        try:
            user = await update_by_email(
                db,
                email,
                {"account_number": account_number, "account_type": account_type},
            )
        except AlreadyExistsError:
            if attempt == attempts:
                raise
            logger.info(
                "Account number collided, drawing again",
                extra={"action": "create_bank_account", "resource": email},
            )
            continue

        if user is None:
            raise UserNotFoundError(email)
        return user


# ---------------------------------------------------------------------------
# Ledger operations
# ---------------------------------------------------------------------------

async def deposit(db: AsyncSession, email: str, amount_cents: int) -> User:
    """
    Add `amount_cents` to the user's balance.

    Returns:
        The User with its post-deposit balance.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        UserNotFoundError: If no record matches.
    """
    if amount_cents <= 0:
        raise InvalidAmountError(amount_cents)

    with translate_store_errors("deposit"):
        result = await db.execute(
            update(User)
            .where(User.email == email)
            .values(balance_cents=User.balance_cents + amount_cents)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise UserNotFoundError(email)

        user = await _reload(db, email)

    logger.info(
        "Deposited %d cents",
        amount_cents,
        extra={"action": "deposit", "resource": email},
    )
    return user


async def withdraw(db: AsyncSession, email: str, amount_cents: int) -> User:
    """
    Subtract `amount_cents` from the user's balance if it covers the amount.

    The sufficiency check and the decrement are the same statement, so the
    balance can never be driven below zero by interleaved requests.

    Returns:
        The User with its post-withdrawal balance.

    Raises:
        InvalidAmountError: If amount_cents <= 0.
        UserNotFoundError: If no record matches.
        InsufficientFundsError: If the balance is less than amount_cents.
    """
    if amount_cents <= 0:
        raise InvalidAmountError(amount_cents)

    with translate_store_errors("withdraw"):
        result = await db.execute(
            update(User)
            .where(User.email == email)
            .where(User.balance_cents >= amount_cents)
            .values(balance_cents=User.balance_cents - amount_cents)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            user = await _reload(db, email)
            logger.info(
                "Withdrew %d cents",
                amount_cents,
                extra={"action": "withdraw", "resource": email},
            )
            return user

        # Zero rows: either there's no such user or the balance is too low
        exists = await db.scalar(select(User.id).where(User.email == email))

    if exists is None:
        raise UserNotFoundError(email)

    logger.info(
        "Withdrawal of %d cents declined",
        amount_cents,
        extra={"action": "withdraw", "resource": email, "error_type": "insufficient_funds"},
    )
    raise InsufficientFundsError(email, amount_cents)
