# producttable/core/security.py

from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union
import hashlib
import hmac
from jose import jwt, JWTError

from producttable.core.config import settings

# ------------------------------------------------------------------------------
# 1. JSON Web Token (JWT) Management
#    - Tokens are issued elsewhere; this service only verifies them.
#    - create_access_token exists for operators' tooling and the test-suite.
# ------------------------------------------------------------------------------

def create_access_token(subject: Union[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Creates a new JWT access token.

    :param subject: The subject of the token (operator id). Encoded in the 'sub' claim.
    :param expires_delta: Optional timedelta for token expiration. If None, uses default from settings.
    :return: The encoded JWT string.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "exp": expire,
        "sub": str(subject),
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_token(token: str) -> dict:
    """
    Decodes and verifies a JWT access token (signature, expiration, algorithm).

    :raises JWTError: for any invalid token; the caller decides how to respond.
    """
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise

# ------------------------------------------------------------------------------
# 2. Editor API keys
# ------------------------------------------------------------------------------

def get_api_key_hash(api_key_secret: str) -> str:
    """Hashes an API key secret."""
    return hashlib.sha256(api_key_secret.encode()).hexdigest()

def verify_api_key_hash(api_key_secret: str, stored_hash: Optional[str]) -> bool:
    """Verifies a plain API key secret against a stored hash in constant time."""
    if not stored_hash:
        return False
    return hmac.compare_digest(get_api_key_hash(api_key_secret), stored_hash)
