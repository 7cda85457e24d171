"""User endpoints"""

from fastapi import APIRouter, Depends

from tripledger.api.deps import get_current_user
from tripledger.models.user import User
from tripledger.schemas.user import UserResponse

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """
    Get the authenticated user.

    Returns:
        Current user profile
    """
    return UserResponse.model_validate(current_user)
