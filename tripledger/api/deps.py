"""Dependency injection (auth, db)"""

from typing import Optional
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from tripledger.core.exceptions import AuthenticationError, AuthorizationError
from tripledger.core.security import verify_token
from tripledger.database import get_db
from tripledger.models.user import User
from tripledger.repositories.user_repository import UserRepository

# Tokens are issued elsewhere; this service only verifies them
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Get current authenticated user from the bearer JWT.

    Args:
        credentials: Bearer credentials from the Authorization header
        db: Database session

    Returns:
        Current user

    Raises:
        AuthenticationError: If the token is missing or invalid, or the user
            does not exist
        AuthorizationError: If the user is inactive
    """
    credentials_exception = AuthenticationError("Could not validate credentials")

    if credentials is None:
        raise credentials_exception

    try:
        payload = verify_token(credentials.credentials)
        user_id_str: str = payload.get("sub")

        if user_id_str is None:
            raise credentials_exception

        user_id = UUID(user_id_str)

    except (JWTError, ValueError):
        raise credentials_exception

    user = await UserRepository.get_by_id(db, user_id)

    if user is None:
        raise credentials_exception

    if not user.is_active:
        raise AuthorizationError("Inactive user")

    return user
