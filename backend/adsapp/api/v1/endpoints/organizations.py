from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from adsapp.schemas.organization import Organization, OrganizationCreate, OrganizationWithLicenses
from adsapp.schemas.profile import CurrentIdentity
from adsapp.models.profile import Profile
from adsapp.core.dependencies import get_current_identity, get_current_profile
from adsapp.database import get_db
from adsapp.services import license_service, organization_service

router = APIRouter()

@router.post("/", response_model=Organization, status_code=status.HTTP_201_CREATED)
async def create_organization(
    organization_in: OrganizationCreate,
    db: AsyncSession = Depends(get_db),
    identity: CurrentIdentity = Depends(get_current_identity),
):
    """
    Create a new organization with the caller as its owner.
    """
    return await organization_service.create_organization_with_owner(db, organization_in, identity)

@router.get("/me", response_model=OrganizationWithLicenses)
async def read_my_organization(
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    organization = await organization_service.get_organization(db, current_profile.organization_id)
    licenses = license_service.build_license_usage(
        organization.id, organization.max_team_members, organization.used_team_members
    )
    return OrganizationWithLicenses(
        **Organization.model_validate(organization).model_dump(),
        licenses=licenses,
    )
