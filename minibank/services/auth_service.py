"""
Authentication service: account creation, login, and credential updates.

This module contains the business logic around credentials, separated from
HTTP concerns. Handlers call these functions; the repository does the
storage.

Create-account flow:
  1. Reject an email that's already registered
  2. Hash the password with Argon2id
  3. Allocate a unique 10-digit account number
  4. Insert the user with a zero balance

Login flow:
  1. Look up user by email (404 if absent)
  2. Verify password against stored hash (401 on mismatch)
  3. Return a JWT token asserting the email

Passwords exist in plaintext only for the duration of a call; they are
hashed before any write and never logged.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from minibank.exceptions import AlreadyExistsError, AuthenticationFailedError
from minibank.logging_config import get_logger
from minibank.models.user import User
from minibank.security import create_access_token, hash_password, verify_password
from minibank.services import user_repository

logger = get_logger(__name__)


async def create_account(
    db: AsyncSession,
    name: str,
    email: str,
    password: str,
) -> User:
    """
    Register a new user with a checking account and zero balance.

    Raises:
        AlreadyExistsError: If the email is already registered.
    """
    if await user_repository.find_many_by_email(db, email):
        raise AlreadyExistsError(email)

    account_number = await user_repository.allocate_account_number(db)

    return await user_repository.create_user(
        db,
        name=name,
        email=email,
        hashed_password=hash_password(password),
        account_number=account_number,
    )


async def login(
    db: AsyncSession,
    email: str,
    password: str,
) -> tuple[User, str]:
    """
    Authenticate a user and return a JWT token.

    Returns:
        Tuple of (User instance, JWT token string).

    Raises:
        UserNotFoundError: If the email isn't registered.
        AuthenticationFailedError: If the password is wrong.
    """
    user = await user_repository.find_by_email(db, email)

    if not verify_password(password, user.hashed_password):
        logger.info(
            "Login rejected",
            extra={"action": "login", "resource": email, "error_type": "authentication_failed"},
        )
        raise AuthenticationFailedError()

    logger.info("Login succeeded", extra={"action": "login", "resource": email})
    return user, create_access_token(user.email)


async def update_user(
    db: AsyncSession,
    email: str,
    name: str | None = None,
    password: str | None = None,
) -> User | None:
    """
    Change a user's name and/or password.

    With neither given there is nothing to write, and the current record
    is returned as-is.

    Returns:
        The updated User, or None if no record matched.

    Raises:
        UserNotFoundError: If nothing is to change and the email isn't registered.
    """
    if not name and not password:
        return await user_repository.find_by_email(db, email)

    fields = {
        "name": name,
        "hashed_password": hash_password(password) if password else None,
    }
    return await user_repository.update_by_email(db, email, fields)
