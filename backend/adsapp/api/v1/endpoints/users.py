from fastapi import APIRouter, Depends
from adsapp.schemas.profile import Profile as ProfileSchema
from adsapp.models.profile import Profile
from adsapp.core.dependencies import get_current_profile

router = APIRouter()

@router.get("/me", response_model=ProfileSchema)
async def read_users_me(current_profile: Profile = Depends(get_current_profile)):
    """
    Get the profile of the currently authenticated user.
    """
    return current_profile
