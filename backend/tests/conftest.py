import re
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace
from typing import AsyncGenerator, List
from urllib.parse import unquote

import pytest
import pytest_asyncio
from httpx import AsyncClient
from httpx import ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from adsapp.main import app
from adsapp.database import get_db
from adsapp.core.dependencies import get_current_identity
from adsapp.models.base import Base
from adsapp.models.organization import Organization
from adsapp.models.profile import Profile
from adsapp.schemas.profile import CurrentIdentity
from adsapp.services import license_service
from adsapp.services.email_service import get_email_service

# CRITICAL: Use in-memory SQLite for tests to avoid connection conflicts
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TOKEN_IN_LINK = re.compile(r"token=([A-Za-z0-9_\-%]+)")


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Creates a database session for the test.
    This is the SINGLE source of truth for the database session.
    """
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool, # Required for SQLite
        connect_args={"check_same_thread": False}, # Required for SQLite
    )
    TestingSessionLocal = async_sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
        class_=AsyncSession,
        expire_on_commit=False,  # CRITICAL: Prevents DetachedInstanceError
    )

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with TestingSessionLocal() as session:
        yield session

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


class FakeEmailService:
    """Records outgoing mail instead of talking to SMTP."""

    def __init__(self):
        self.sent: List[dict] = []

    def send_email(self, to_emails, subject, html_content, text_content=None) -> bool:
        self.sent.append({
            "to": list(to_emails),
            "subject": subject,
            "html": html_content,
            "text": text_content,
        })
        return True

    def last_token_for(self, email: str) -> str:
        for message in reversed(self.sent):
            match = TOKEN_IN_LINK.search(message["text"] or "")
            if email in message["to"] and match:
                return unquote(match.group(1))
        raise AssertionError(f"No invitation email sent to {email}")


@pytest.fixture
def email_outbox() -> FakeEmailService:
    return FakeEmailService()


@pytest_asyncio.fixture(scope="function")
async def test_client(db_session: AsyncSession, email_outbox: FakeEmailService) -> AsyncGenerator[AsyncClient, None]:
    """
    Creates an HTTP client with the database and email dependencies overridden.
    """
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_outbox

    try:
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client
    finally:
        app.dependency_overrides.clear()


def login_as(identity: CurrentIdentity) -> None:
    """Make every following request authenticate as ``identity``."""
    async def override_get_identity():
        return identity

    app.dependency_overrides[get_current_identity] = override_get_identity


def new_identity(email: str, full_name: str | None = None) -> CurrentIdentity:
    return CurrentIdentity(id=uuid.uuid4(), email=email, full_name=full_name)


async def seed_organization(
    db: AsyncSession,
    slug: str = "acme",
    max_team_members: int = 5,
    with_admin: bool = False,
) -> SimpleNamespace:
    """
    Creates an organization with an owner (and optionally an admin), keeping
    used_team_members equal to the number of profiles.

    Returns plain ids and identities; ORM instances expire on rollback and
    cannot be lazily reloaded under asyncio.
    """
    owner = new_identity(f"owner@{slug}.example.com", "Owner")
    admin = new_identity(f"admin@{slug}.example.com", "Admin") if with_admin else None

    organization = Organization(
        name=slug.title(),
        slug=slug,
        max_team_members=max_team_members,
        used_team_members=2 if with_admin else 1,
    )
    db.add(organization)
    await db.flush()

    db.add(Profile(id=owner.id, organization_id=organization.id, email=owner.email, full_name=owner.full_name, role="owner"))
    if admin:
        db.add(Profile(id=admin.id, organization_id=organization.id, email=admin.email, full_name=admin.full_name, role="admin"))
    await db.commit()

    return SimpleNamespace(id=organization.id, owner=owner, admin=admin)


async def seat_counts(db: AsyncSession, organization_id: uuid.UUID) -> tuple:
    usage = await license_service.check_available_licenses(db, organization_id)
    return usage.used_seats, usage.max_seats


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def subjects_sent_to(outbox: FakeEmailService, email: str) -> List[str]:
    return [message["subject"] for message in outbox.sent if email in message["to"]]
