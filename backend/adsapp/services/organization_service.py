import logging
import uuid
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from adsapp.core.config import settings
from adsapp.core.exceptions import AlreadyMember, OrganizationNotFound, SlugTaken
from adsapp.models.organization import Organization
from adsapp.models.profile import Profile, ProfileRoleEnum
from adsapp.schemas.organization import OrganizationCreate
from adsapp.schemas.profile import CurrentIdentity
from adsapp.services import membership_service

logger = logging.getLogger(__name__)

async def get_organization(db: AsyncSession, organization_id: uuid.UUID) -> Organization:
    result = await db.execute(
        select(Organization)
        .filter(Organization.id == organization_id)
        .execution_options(populate_existing=True)
    )
    organization = result.scalars().first()
    if organization is None:
        raise OrganizationNotFound()
    return organization

async def get_organization_by_slug(db: AsyncSession, slug: str) -> Organization | None:
    result = await db.execute(select(Organization).filter(Organization.slug == slug))
    return result.scalars().first()

async def create_organization_with_owner(
    db: AsyncSession,
    organization_in: OrganizationCreate,
    identity: CurrentIdentity,
) -> Organization:
    """
    Creates a new organization and makes the caller its owner. The owner
    occupies the first seat, so used_team_members starts at 1.
    """
    if await membership_service.get_profile(db, identity.id) is not None:
        raise AlreadyMember("You already belong to an organization")
    if await get_organization_by_slug(db, organization_in.slug) is not None:
        raise SlugTaken(organization_in.slug)

    new_organization = Organization(
        name=organization_in.name,
        slug=organization_in.slug,
        max_team_members=max(settings.DEFAULT_MAX_TEAM_MEMBERS, 1),
        used_team_members=1,
    )
    db.add(new_organization)
    try:
        await db.flush()
        db.add(Profile(
            id=identity.id,
            organization_id=new_organization.id,
            email=identity.email.lower(),
            full_name=identity.full_name,
            role=ProfileRoleEnum.OWNER.value,
        ))
        await db.commit()
    except IntegrityError:
        # Concurrent signup took the slug (or created the profile) first
        await db.rollback()
        raise SlugTaken(organization_in.slug)

    await db.refresh(new_organization)
    logger.info("Organization %s created with owner %s", new_organization.id, identity.id)
    return new_organization
