"""
Profile membership and seat accounting.

``organizations.used_team_members`` is only ever changed here, through single
conditional UPDATE statements executed in the caller's transaction. None of
these functions commit; the caller owns the transaction boundary so that the
counter and the profile mutation land (or roll back) together.
"""
import logging
import uuid
from typing import List

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from adsapp.core.exceptions import AuthorizationError, LicenseLimitExceeded, MemberNotFound
from adsapp.models.organization import Organization
from adsapp.models.profile import Profile, ProfileRoleEnum
from adsapp.services import license_service

logger = logging.getLogger(__name__)

async def claim_seat(db: AsyncSession, organization_id: uuid.UUID) -> None:
    """
    Atomically takes one seat. The WHERE clause makes check-and-increment a
    single statement, so two concurrent claims on the last seat cannot both win.
    """
    result = await db.execute(
        update(Organization)
        .where(
            Organization.id == organization_id,
            Organization.used_team_members < Organization.max_team_members,
        )
        .values(used_team_members=Organization.used_team_members + 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        usage = await license_service.check_available_licenses(db, organization_id)
        raise LicenseLimitExceeded(usage.available_seats, usage.max_seats, usage.used_seats)

async def release_seat(db: AsyncSession, organization_id: uuid.UUID) -> None:
    result = await db.execute(
        update(Organization)
        .where(Organization.id == organization_id, Organization.used_team_members > 0)
        .values(used_team_members=Organization.used_team_members - 1)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        logger.warning("Seat counter for organization %s already at zero on release", organization_id)

async def get_profile(db: AsyncSession, profile_id: uuid.UUID) -> Profile | None:
    result = await db.execute(select(Profile).filter(Profile.id == profile_id).execution_options(populate_existing=True))
    return result.scalars().first()

async def get_member(db: AsyncSession, profile_id: uuid.UUID, organization_id: uuid.UUID) -> Profile | None:
    """
    Fetches a single profile, ensuring it belongs to the correct organization.
    """
    result = await db.execute(
        select(Profile).filter(Profile.id == profile_id, Profile.organization_id == organization_id)
    )
    return result.scalars().first()

async def get_member_by_email(db: AsyncSession, email: str, organization_id: uuid.UUID) -> Profile | None:
    result = await db.execute(
        select(Profile).filter(Profile.email == email.lower(), Profile.organization_id == organization_id)
    )
    return result.scalars().first()

async def list_members(db: AsyncSession, organization_id: uuid.UUID) -> List[Profile]:
    result = await db.execute(
        select(Profile)
        .filter(Profile.organization_id == organization_id)
        .order_by(Profile.created_at)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()

async def add_member(
    db: AsyncSession,
    organization_id: uuid.UUID,
    user_id: uuid.UUID,
    email: str,
    role: str,
    full_name: str | None = None,
) -> Profile:
    """
    Takes a seat and creates or links the user's profile in the organization.
    A profile that belonged to another organization is moved, and that
    organization gets its seat back in the same transaction.
    """
    await claim_seat(db, organization_id)

    profile = await get_profile(db, user_id)
    if profile is None:
        profile = Profile(
            id=user_id,
            organization_id=organization_id,
            email=email.lower(),
            full_name=full_name,
            role=role,
        )
        db.add(profile)
    else:
        previous_organization_id = profile.organization_id
        profile.organization_id = organization_id
        profile.role = role
        await release_seat(db, previous_organization_id)

    await db.flush()
    return profile

async def remove_member(db: AsyncSession, organization_id: uuid.UUID, profile_id: uuid.UUID) -> None:
    profile = await get_member(db, profile_id, organization_id)
    if profile is None:
        raise MemberNotFound()
    if profile.role == ProfileRoleEnum.OWNER.value:
        raise AuthorizationError("The organization owner cannot be removed")

    await db.delete(profile)
    await release_seat(db, organization_id)
    await db.flush()
