"""
Per-organization invitation policy: expiry, reminder cadence and which email
domains may be invited. Organizations that never saved settings get the
global defaults from core.config.
"""
import logging
import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from adsapp.core.config import settings
from adsapp.core.exceptions import EmailDomainNotAllowed
from adsapp.models.invitation_settings import InvitationSettings as InvitationSettingsModel
from adsapp.schemas.invitation_settings import InvitationSettings, InvitationSettingsUpdate
from adsapp.services import organization_service

logger = logging.getLogger(__name__)

def default_settings(organization_id: uuid.UUID) -> InvitationSettings:
    return InvitationSettings(
        organization_id=organization_id,
        default_expiration_days=settings.INVITATION_EXPIRY_DAYS,
        max_reminders=settings.INVITATION_MAX_REMINDERS,
        reminder_interval_days=settings.INVITATION_REMINDER_INTERVAL_DAYS,
        auto_reminders=settings.INVITATION_AUTO_REMINDERS,
        allowed_domains=[],
        restricted_domains=[],
    )

def effective_settings(organization_id: uuid.UUID, row: InvitationSettingsModel | None) -> InvitationSettings:
    if row is None:
        return default_settings(organization_id)
    return InvitationSettings.model_validate(row)

async def get_settings_row(db: AsyncSession, organization_id: uuid.UUID) -> InvitationSettingsModel | None:
    result = await db.execute(
        select(InvitationSettingsModel)
        .filter(InvitationSettingsModel.organization_id == organization_id)
        .execution_options(populate_existing=True)
    )
    return result.scalars().first()

async def get_invitation_settings(db: AsyncSession, organization_id: uuid.UUID) -> InvitationSettings:
    return effective_settings(organization_id, await get_settings_row(db, organization_id))

async def update_invitation_settings(
    db: AsyncSession,
    organization_id: uuid.UUID,
    settings_in: InvitationSettingsUpdate,
) -> InvitationSettings:
    """
    Upserts the organization's settings. Fields left out of the request keep
    their current (or default) value.
    """
    await organization_service.get_organization(db, organization_id)

    row = await get_settings_row(db, organization_id)
    if row is None:
        row = InvitationSettingsModel(**default_settings(organization_id).model_dump())
        db.add(row)

    for field, value in settings_in.model_dump(exclude_unset=True).items():
        if value is None and field in ("allowed_domains", "restricted_domains"):
            value = []
        if value is not None:
            setattr(row, field, value)

    await db.commit()
    await db.refresh(row)
    logger.info("Invitation settings updated for organization %s", organization_id)
    return InvitationSettings.model_validate(row)

def validate_email_domain(email: str, invitation_settings: InvitationSettings) -> None:
    """
    Applies the allow list first, then the block list. Expects a normalized,
    lowercase address.
    """
    domain = email.rsplit("@", 1)[-1]
    if invitation_settings.allowed_domains and domain not in invitation_settings.allowed_domains:
        raise EmailDomainNotAllowed(domain, "not allowed")
    if domain in invitation_settings.restricted_domains:
        raise EmailDomainNotAllowed(domain, "restricted")
