from fastapi import APIRouter, Depends
from portal.core.dependencies import get_current_user
from portal.database.supabase_client import get_supabase
from portal.modules.profile.schemas import (
    NameUpdate, PasswordUpdate, PreferencesUpdate, ProfileResponse, SuccessResponse
)
from portal.modules.profile.service import ProfileService
from portal.modules.users.schemas import UserProfile
from supabase import Client

router = APIRouter(prefix="/profile", tags=["profile"])


def get_profile_service(supabase: Client = Depends(get_supabase)) -> ProfileService:
    return ProfileService(supabase)


@router.put("/name", response_model=ProfileResponse)
async def update_name(
    body: NameUpdate,
    user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Update display name"""
    return ProfileResponse(user=service.update_name(user, body.name))


@router.put("/password", response_model=SuccessResponse)
async def update_password(
    body: PasswordUpdate,
    user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Set a new password"""
    service.update_password(user, body.new_password)
    return SuccessResponse(success=True)


@router.put("/preferences", response_model=ProfileResponse)
async def update_preferences(
    body: PreferencesUpdate,
    user: UserProfile = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service)
):
    """Update UI preferences (theme: dark | light)"""
    return ProfileResponse(user=service.update_preferences(user, body.theme))
