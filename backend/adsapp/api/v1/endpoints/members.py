from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from adsapp.schemas.profile import Profile as ProfileSchema
from adsapp.models.profile import Profile
from adsapp.core.dependencies import get_current_profile, require_team_manager
from adsapp.database import get_db
from adsapp.services import membership_service

router = APIRouter()

@router.get("/", response_model=List[ProfileSchema])
async def list_members(
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    List all team members of the caller's organization.
    """
    return await membership_service.list_members(db=db, organization_id=current_profile.organization_id)

@router.delete("/{profile_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    profile_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(require_team_manager),
):
    """
    Remove a member and free their seat in the same transaction.
    """
    try:
        await membership_service.remove_member(
            db=db, organization_id=current_profile.organization_id, profile_id=profile_id
        )
        await db.commit()
    except Exception:
        await db.rollback()
        raise
