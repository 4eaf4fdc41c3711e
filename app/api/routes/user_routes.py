"""
User Routes

PUT /users/profile - Update own persona / company profile
GET /users/candidates - Veterans with their latest resume (employers, admins)
GET /users/{user_id} - Public profile
"""

from fastapi import APIRouter, HTTPException, Depends
from typing import List

from app.core.auth import get_current_user
from app.services.candidate_service import get_candidate_service
from app.services.mongo_service import UserService
from app.schemas.schemas import (
    ProfileUpdate, UserResponse, PublicUserResponse, CandidateResponse
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.put("/profile", response_model=UserResponse)
async def update_profile(update: ProfileUpdate, user: dict = Depends(get_current_user)):
    """
    Update the persona (veterans) and/or company profile (employers).

    The persona drives job matching: MOS code, clearance, skills and location.
    """
    fields = update.model_dump(exclude_unset=True, exclude_none=True)
    if not fields:
        return UserResponse(**user)

    updated = UserService().update(user["id"], fields)
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(**updated)


@router.get("/candidates", response_model=List[CandidateResponse])
async def list_candidates(user: dict = Depends(get_current_user)):
    """All veterans, newest first, with their latest resume attached."""
    if user.get("role") not in ("employer", "admin"):
        raise HTTPException(status_code=403, detail="Employers only")
    return get_candidate_service().list_veterans()


@router.get("/{user_id}", response_model=PublicUserResponse)
async def get_user(user_id: str, user: dict = Depends(get_current_user)):
    """Public profile (name and role) of any account."""
    found = UserService().get_by_id(user_id)
    if not found:
        raise HTTPException(status_code=404, detail="User not found")
    return PublicUserResponse(**found)
