"""User profile routes"""

import logging

from fastapi import APIRouter, Depends

from grama_common.models import User

from ..database import UserDatabase
from ..models.auth import ProfileUpdateRequest, UserResponse
from .deps import get_current_user, get_user_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user", tags=["User"])


@router.get("/me", response_model=UserResponse)
async def get_me(user: User = Depends(get_current_user)):
    """Get the signed-in user"""
    return UserResponse(user=user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    request: ProfileUpdateRequest,
    user: User = Depends(get_current_user),
    users: UserDatabase = Depends(get_user_db),
):
    """Update the signed-in user's profile. Fields left out are unchanged."""
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    updated = users.update_profile(user.id, changes)
    logger.info(f"Profile updated for {user.id}: {sorted(changes)}")
    return UserResponse(user=updated)
