from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from adsapp.schemas.invitation_settings import InvitationSettings, InvitationSettingsUpdate
from adsapp.models.profile import Profile
from adsapp.core.dependencies import get_current_profile, require_team_manager
from adsapp.database import get_db
from adsapp.services import invitation_settings_service

router = APIRouter()

@router.get("/", response_model=InvitationSettings)
async def read_invitation_settings(
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Effective invitation settings of the caller's organization.
    """
    return await invitation_settings_service.get_invitation_settings(db, current_profile.organization_id)

@router.patch("/", response_model=InvitationSettings)
async def update_invitation_settings(
    settings_in: InvitationSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(require_team_manager),
):
    """
    Change expiry, reminder cadence or domain restrictions. Applies to
    invitations issued (or reminded) from now on.
    """
    return await invitation_settings_service.update_invitation_settings(
        db, current_profile.organization_id, settings_in
    )
