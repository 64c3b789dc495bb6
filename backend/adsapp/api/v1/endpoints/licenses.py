from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from adsapp.schemas.license import LicenseUsage
from adsapp.models.profile import Profile
from adsapp.core.dependencies import get_current_profile
from adsapp.database import get_db
from adsapp.services import license_service

router = APIRouter()

@router.get("/", response_model=LicenseUsage)
async def read_licenses(
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    Seat usage of the caller's organization.
    """
    return await license_service.check_available_licenses(db, current_profile.organization_id)
