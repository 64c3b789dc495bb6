import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from adsapp.core.exceptions import LicenseLimitExceeded, OrganizationNotFound
from adsapp.services import license_service, membership_service

from conftest import seat_counts, seed_organization


def test_build_license_usage():
    usage = license_service.build_license_usage(uuid.uuid4(), max_seats=5, used_seats=2)

    assert usage.available_seats == 3
    assert usage.can_invite is True


def test_build_license_usage_never_reports_negative_seats():
    usage = license_service.build_license_usage(uuid.uuid4(), max_seats=2, used_seats=3)

    assert usage.available_seats == 0
    assert usage.can_invite is False


@pytest.mark.asyncio
async def test_check_available_licenses(db_session: AsyncSession):
    org = await seed_organization(db_session, max_team_members=4, with_admin=True)

    usage = await license_service.check_available_licenses(db_session, org.id)

    assert (usage.available_seats, usage.max_seats, usage.used_seats) == (2, 4, 2)


@pytest.mark.asyncio
async def test_check_available_licenses_unknown_organization(db_session: AsyncSession):
    with pytest.raises(OrganizationNotFound):
        await license_service.check_available_licenses(db_session, uuid.uuid4())


@pytest.mark.asyncio
async def test_claim_seat_stops_at_max(db_session: AsyncSession):
    org = await seed_organization(db_session, max_team_members=2)

    await membership_service.claim_seat(db_session, org.id)
    with pytest.raises(LicenseLimitExceeded) as exc_info:
        await membership_service.claim_seat(db_session, org.id)
    await db_session.commit()

    assert exc_info.value.used_seats == 2
    assert await seat_counts(db_session, org.id) == (2, 2)


@pytest.mark.asyncio
async def test_release_seat_never_goes_below_zero(db_session: AsyncSession):
    org = await seed_organization(db_session)

    await membership_service.release_seat(db_session, org.id)
    await membership_service.release_seat(db_session, org.id)
    await db_session.commit()

    assert await seat_counts(db_session, org.id) == (0, 5)
