import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from adsapp.models.profile import Profile
from adsapp.services import invitation_service

from conftest import login_as, new_identity, seed_organization

SETTINGS_URL = "/api/v1/invitation-settings/"


@pytest.mark.asyncio
async def test_read_default_settings(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session)
    login_as(org.owner)

    response = await test_client.get(SETTINGS_URL)

    assert response.status_code == 200
    assert response.json() == {
        "organization_id": str(org.id),
        "default_expiration_days": 7,
        "max_reminders": 3,
        "reminder_interval_days": 2,
        "auto_reminders": False,
        "allowed_domains": [],
        "restricted_domains": [],
    }


@pytest.mark.asyncio
async def test_update_settings_normalizes_domains(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session, with_admin=True)
    login_as(org.admin)

    response = await test_client.patch(SETTINGS_URL, json={
        "restricted_domains": [" @Gmail.com", "gmail.com", "HOTMAIL.com"],
        "max_reminders": 5,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["restricted_domains"] == ["gmail.com", "hotmail.com"]
    assert data["max_reminders"] == 5
    assert data["default_expiration_days"] == 7

    # A later partial update keeps what it does not mention
    again = await test_client.patch(SETTINGS_URL, json={"auto_reminders": True})
    assert again.json()["restricted_domains"] == ["gmail.com", "hotmail.com"]
    assert again.json()["auto_reminders"] is True


@pytest.mark.asyncio
async def test_update_settings_validates_input(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session)
    login_as(org.owner)

    bad_domain = await test_client.patch(SETTINGS_URL, json={"allowed_domains": ["not a domain"]})
    bad_expiry = await test_client.patch(SETTINGS_URL, json={"default_expiration_days": 0})

    assert bad_domain.status_code == 400
    assert bad_expiry.status_code == 400


@pytest.mark.asyncio
async def test_agents_cannot_update_settings(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session)
    agent = new_identity("agent@acme.example.com")
    db_session.add(Profile(id=agent.id, organization_id=org.id, email=agent.email, role="agent"))
    await db_session.commit()
    login_as(agent)

    readable = await test_client.get(SETTINGS_URL)
    response = await test_client.patch(SETTINGS_URL, json={"max_reminders": 0})

    assert readable.status_code == 200
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_allowed_domains_limit_invitations(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session)
    login_as(org.owner)
    await test_client.patch(SETTINGS_URL, json={"allowed_domains": ["acme.example.com"]})

    outside = await test_client.post("/api/v1/invitations/", json={"email": "someone@example.com", "role": "member"})
    inside = await test_client.post("/api/v1/invitations/", json={"email": "colleague@acme.example.com", "role": "member"})

    assert outside.status_code == 400
    assert outside.json()["error"]["type"] == "email_domain_not_allowed"
    assert inside.status_code == 201


@pytest.mark.asyncio
async def test_restricted_domains_block_invitations(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session)
    login_as(org.owner)
    await test_client.patch(SETTINGS_URL, json={"restricted_domains": ["example.com"]})

    response = await test_client.post("/api/v1/invitations/", json={"email": "Someone@Example.com", "role": "member"})

    assert response.status_code == 400
    assert response.json()["error"]["type"] == "email_domain_not_allowed"
    assert response.json()["error"]["details"] == {"domain": "example.com"}


@pytest.mark.asyncio
async def test_organization_expiry_applies_to_new_invitations(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session)
    login_as(org.owner)
    await test_client.patch(SETTINGS_URL, json={"default_expiration_days": 14})

    created = await test_client.post("/api/v1/invitations/", json={"email": "later@example.com", "role": "member"})

    invitation = await invitation_service.get_invitation(db_session, uuid.UUID(created.json()["id"]), org.id)
    lifetime = invitation_service._as_utc(invitation.expires_at) - invitation_service._as_utc(invitation.created_at)
    assert lifetime == timedelta(days=14)


@pytest.mark.asyncio
async def test_organization_reminder_limit_applies_to_resend(test_client: AsyncClient, db_session: AsyncSession):
    org = await seed_organization(db_session)
    login_as(org.owner)
    await test_client.patch(SETTINGS_URL, json={"max_reminders": 0})
    created = await test_client.post("/api/v1/invitations/", json={"email": "once@example.com", "role": "member"})

    response = await test_client.post(f"/api/v1/invitations/{created.json()['id']}/resend")

    assert response.status_code == 429
    assert response.json()["error"]["type"] == "reminder_limit_reached"
