"""Bearer token helpers"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from jose import jwt

from tripledger.config import get_settings

settings = get_settings()


def create_access_token(user_id: UUID, expires_delta: Optional[timedelta] = None) -> str:
    """
    Sign an access token for a user.

    Token issuance belongs to the identity provider; this exists for the seed
    script and the test suite.
    """
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def verify_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a JWT.

    Raises:
        JWTError: If the signature is invalid or the token expired
    """
    return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
