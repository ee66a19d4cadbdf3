from fastapi import APIRouter, HTTPException, status, Depends, Path, Query
from typing import List, Optional
from pydantic import BaseModel

from ....core.config import Settings
from ....core.security import create_access_token
from ....schemas.profile import Profile, ProfileUpdate, SkillMatchResponse
from ....services.profile_service import AuthUser, ProfileService
from ..deps import get_current_user, get_profile_service, get_settings, unwrap

router = APIRouter(tags=["users"])

class DevTokenRequest(BaseModel):
    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

@router.post("/dev/token", response_model=Token)
async def dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(get_settings)
):
    """
    Issue a token for local development.

    Production tokens come from Supabase Auth; this endpoint is disabled there.
    """
    if settings.is_production:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")

    token = create_access_token(settings, body.user_id, email=body.email, name=body.name)
    return {"access_token": token, "token_type": "bearer"}

@router.get("/me", response_model=Profile)
async def read_my_profile(
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Get the current user's profile. A default profile is created on first login.
    """
    return await profiles.get_or_create_profile(current_user)

@router.put("/me", response_model=Profile)
async def update_my_profile(
    update: ProfileUpdate,
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Update the current user's skills, availability and visibility.
    """
    return unwrap(await profiles.update_profile(current_user, update))

@router.get("/", response_model=List[Profile])
async def browse_users(
    search: str = Query("", max_length=100, description="Match on name or offered skill"),
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    List public profiles other than the caller, newest first.
    """
    return await profiles.browse(current_user.id, search)

@router.get("/{user_id}", response_model=Profile)
async def get_user(
    user_id: str = Path(...),
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
):
    return await profiles.get_public_profile(user_id, current_user.id)

@router.get("/{user_id}/matches", response_model=SkillMatchResponse)
async def get_matches(
    user_id: str = Path(...),
    current_user: AuthUser = Depends(get_current_user),
    profiles: ProfileService = Depends(get_profile_service)
):
    """
    Skills the caller can teach this user and skills the caller can learn from them.
    """
    viewer = await profiles.get_or_create_profile(current_user)
    match = await profiles.matches_with(viewer, user_id)
    return {
        "user_id": user_id,
        "can_offer": match.can_offer,
        "can_learn": match.can_learn,
        "is_mutual": match.is_mutual,
    }
