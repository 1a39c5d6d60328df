"""
FastAPI dependencies for token authentication and role checks.

  get_current_user (JWT -> User)
      └── require_staff (User -> User)   [ADMIN or BANK_EMPLOYEE role]

Balance and profile endpoints address users by email in the request body
and take no token. Only the staff listing endpoint is guarded.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from minibank.database import get_db
from minibank.exceptions import UserNotFoundError
from minibank.models.user import Role, User
from minibank.security import decode_access_token
from minibank.services import user_repository


# Reads "Authorization: Bearer <token>"; tokenUrl is informational for docs
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/account/login")

STAFF_ROLES = frozenset({Role.ADMIN, Role.BANK_EMPLOYEE})


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Validate the bearer token and return the user it names.

    Raises:
        HTTPException 401: If the token is invalid or the user no longer exists.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except JWTError:
        raise credentials_exception

    email: str | None = payload.get("sub")
    if email is None:
        raise credentials_exception

    try:
        return await user_repository.find_by_email(db, email)
    except UserNotFoundError:
        raise credentials_exception


async def require_staff(
    user: User = Depends(get_current_user),
) -> User:
    """
    Require an ADMIN or BANK_EMPLOYEE role.

    Raises:
        HTTPException 403: If the user is a regular customer.
    """
    if user.role not in STAFF_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Staff access required",
        )
    return user
