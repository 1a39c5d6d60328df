"""
Security utilities: password hashing and JWT tokens.

1. PASSWORD HASHING (Argon2)
   - Passwords are never stored in plaintext
   - passlib's CryptContext wraps Argon2id with fixed cost parameters, so
     every hash in the store costs the same to verify
   - A stored value that isn't a recognizable hash counts as a failed
     verification, never as an error the caller has to handle

2. JWT TOKENS
   - Login returns a signed JWT whose "sub" claim is the user's email
   - Signed with SECRET_KEY using HS256, valid for
     ACCESS_TOKEN_EXPIRE_MINUTES (default: 60)
   - No refresh tokens and no revocation list: a token is good until it
     expires
"""

from datetime import datetime, timedelta, timezone

from jose import jwt
from passlib.context import CryptContext

from minibank.config import settings
from minibank.logging_config import get_logger

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# 1. Password Hashing (Argon2)
# ---------------------------------------------------------------------------

pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
    argon2__time_cost=3,
    argon2__memory_cost=65536,
    argon2__parallelism=4,
)


def hash_password(plain_password: str) -> str:
    """
    Hash a plaintext password using Argon2id.

    Returns:
        An Argon2 hash string (e.g., "$argon2id$v=19$m=65536,t=3,p=4$...").
    """
    return pwd_context.hash(plain_password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against a stored hash.

    A mismatch and a malformed stored hash both return False; callers treat
    either as "authentication failed".
    """
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError):
        logger.warning(
            "Stored password hash could not be verified",
            extra={"action": "verify_password", "error_type": "malformed_hash"},
        )
        return False


# ---------------------------------------------------------------------------
# 2. JWT Tokens
# ---------------------------------------------------------------------------


def create_access_token(email: str, expires_delta: timedelta | None = None) -> str:
    """
    Create a signed JWT asserting the identity `email`.

    Args:
        email: Becomes the "sub" claim.
        expires_delta: Optional custom lifetime. Defaults to
                       ACCESS_TOKEN_EXPIRE_MINUTES from settings.
    """
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": email,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Decode and verify a JWT access token.

    Raises:
        JWTError: If the token is expired, tampered with, or invalid.
    """
    return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
