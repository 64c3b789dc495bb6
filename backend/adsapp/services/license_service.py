import logging
import uuid
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from adsapp.core.exceptions import OrganizationNotFound
from adsapp.models.organization import Organization
from adsapp.schemas.license import LicenseUsage

logger = logging.getLogger(__name__)

def build_license_usage(organization_id: uuid.UUID, max_seats: int, used_seats: int) -> LicenseUsage:
    available = max_seats - used_seats
    if available < 0:
        logger.warning(
            "Seat invariant violated for organization %s: used=%s exceeds max=%s",
            organization_id, used_seats, max_seats,
        )
        available = 0
    return LicenseUsage(
        available_seats=available,
        max_seats=max_seats,
        used_seats=used_seats,
        can_invite=available > 0,
    )

async def check_available_licenses(db: AsyncSession, organization_id: uuid.UUID) -> LicenseUsage:
    """
    Reads max and used seats of an organization in a single statement so both
    numbers come from the same snapshot.
    """
    result = await db.execute(
        select(Organization.max_team_members, Organization.used_team_members)
        .where(Organization.id == organization_id)
    )
    row = result.first()
    if row is None:
        raise OrganizationNotFound()
    return build_license_usage(organization_id, row.max_team_members, row.used_team_members)
