"""
Team invitation lifecycle.

    pending --accept--> accepted
    pending --sweep---> expired   (also on any late accept or resend)
    pending --revoke--> revoked

accepted, expired and revoked are terminal. Every mutating function here is
one database transaction: it commits on success and rolls back on any failure.
Bulk issuance and scheduled reminders run one transaction per invitation.
"""
import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Iterable, List, Optional, Tuple

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from adsapp.core.config import settings
from adsapp.core.exceptions import (
    ADSappError,
    AlreadyMember,
    AuthorizationError,
    DuplicateInvitation,
    InvitationExpired,
    InvitationNotFound,
    InvitationNotPending,
    LicenseLimitExceeded,
    ReminderLimitReached,
    ValidationError,
)
from adsapp.models.invitation_settings import InvitationSettings
from adsapp.models.organization import Organization
from adsapp.models.profile import Profile, ProfileRoleEnum
from adsapp.models.team_invitation import InvitationRoleEnum, InvitationStatusEnum, TeamInvitation
from adsapp.schemas.invitation import BulkInvitationItemResult, BulkInvitationResult, InvitationBulkEntry
from adsapp.schemas.profile import CurrentIdentity
from adsapp.services import invitation_settings_service, license_service, membership_service
from adsapp.services.email_service import EmailService, send_invitation_email

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32 # 256 bits of entropy
DEFAULT_PAGE_SIZE = 50

PENDING = InvitationStatusEnum.PENDING.value
EXPIRED = InvitationStatusEnum.EXPIRED.value
ALLOWED_ROLES = {role.value for role in InvitationRoleEnum}

# Invitation role -> profile role once accepted
PROFILE_ROLE_FOR_INVITATION = {
    InvitationRoleEnum.ADMIN.value: ProfileRoleEnum.ADMIN.value,
    InvitationRoleEnum.MEMBER.value: ProfileRoleEnum.AGENT.value,
}

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything we store is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value

def generate_token() -> Tuple[str, str]:
    """
    Generates a new invitation token.
    Returns a tuple of (raw_token, token_hash). Only the hash is persisted.
    """
    raw_token = secrets.token_urlsafe(TOKEN_BYTES)
    return raw_token, hash_token(raw_token)

def hash_token(raw_token: str) -> str:
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()

def is_expired(invitation: TeamInvitation, now: Optional[datetime] = None) -> bool:
    """Same boundary as the sweep: usable up to and including expires_at."""
    now = now or _utcnow()
    return _as_utc(invitation.expires_at) < now

def normalize_email(email: str) -> str:
    try:
        validated = validate_email(email, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValidationError(f"Invalid email address: {e}", {"email": email})
    return validated.normalized.lower()

def _require_manager(inviter: Profile | None, organization_id: uuid.UUID) -> Profile:
    """Server-side role check. Never trusts a role sent by the client."""
    if inviter is None or inviter.organization_id != organization_id:
        raise AuthorizationError("You are not a member of this organization")
    if not inviter.can_manage_team:
        raise AuthorizationError("Only owners and admins can manage team invitations")
    return inviter

def _require_pending(invitation: TeamInvitation) -> None:
    # Swept invitations timed out; they are not "already resolved" by a person
    if invitation.status == EXPIRED:
        raise InvitationExpired()
    if invitation.status != PENDING:
        raise InvitationNotPending(invitation.status)

def _rotate_token(invitation: TeamInvitation, now: datetime) -> str:
    raw_token, token_hash = generate_token()
    invitation.token_hash = token_hash
    invitation.reminders_sent = invitation.reminders_sent + 1
    invitation.last_reminder_at = now
    return raw_token

async def get_invitation(db: AsyncSession, invitation_id: uuid.UUID, organization_id: uuid.UUID) -> TeamInvitation | None:
    """
    Fetches a single invitation by its ID, ensuring it belongs to the correct organization.
    """
    result = await db.execute(
        select(TeamInvitation).filter(
            TeamInvitation.id == invitation_id,
            TeamInvitation.organization_id == organization_id,
        ).execution_options(populate_existing=True)
    )
    return result.scalars().first()

async def get_pending_invitation(db: AsyncSession, organization_id: uuid.UUID, email: str) -> TeamInvitation | None:
    result = await db.execute(
        select(TeamInvitation).filter(
            TeamInvitation.organization_id == organization_id,
            TeamInvitation.email == email,
            TeamInvitation.status == PENDING,
        )
    )
    return result.scalars().first()

async def list_invitations(
    db: AsyncSession,
    organization_id: uuid.UUID,
    status: Optional[InvitationStatusEnum] = None,
    role: Optional[InvitationRoleEnum] = None,
    email: Optional[str] = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> List[TeamInvitation]:
    """
    Fetches the invitations of one organization, newest first. ``email``
    matches any part of the address, case-insensitively.
    """
    stmt = select(TeamInvitation).filter(TeamInvitation.organization_id == organization_id)
    if status is not None:
        stmt = stmt.filter(TeamInvitation.status == status.value)
    if role is not None:
        stmt = stmt.filter(TeamInvitation.role == role.value)
    if email:
        # Stored addresses are lowercase, so a plain LIKE is case-insensitive
        pattern = email.strip().lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
        stmt = stmt.filter(TeamInvitation.email.like(f"%{pattern}%", escape="\\"))
    result = await db.execute(
        stmt.order_by(TeamInvitation.created_at.desc())
        .limit(limit)
        .offset(offset)
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()

async def issue_invitation(
    db: AsyncSession,
    organization_id: uuid.UUID,
    email: str,
    role: str,
    inviter_id: uuid.UUID,
) -> Tuple[TeamInvitation, str]:
    """
    Creates a pending invitation and returns it with the raw token. The token
    must only be handed to the notification that delivers it to the invitee.
    """
    email = normalize_email(email)
    if role not in ALLOWED_ROLES:
        raise ValidationError(
            f"Role must be one of: {', '.join(sorted(ALLOWED_ROLES))}",
            {"role": role},
        )

    inviter = await membership_service.get_profile(db, inviter_id)
    _require_manager(inviter, organization_id)

    invitation_settings = await invitation_settings_service.get_invitation_settings(db, organization_id)
    invitation_settings_service.validate_email_domain(email, invitation_settings)

    if await membership_service.get_member_by_email(db, email, organization_id):
        raise AlreadyMember("This user is already a member of the organization", {"email": email})

    usage = await license_service.check_available_licenses(db, organization_id)
    if not usage.can_invite:
        raise LicenseLimitExceeded(usage.available_seats, usage.max_seats, usage.used_seats)

    existing = await get_pending_invitation(db, organization_id, email)
    if existing is not None:
        raise DuplicateInvitation(email, existing.id)

    raw_token, token_hash = generate_token()
    now = _utcnow()
    invitation = TeamInvitation(
        organization_id=organization_id,
        email=email,
        role=role,
        invited_by=inviter_id,
        status=PENDING,
        token_hash=token_hash,
        created_at=now,
        expires_at=now + timedelta(days=invitation_settings.default_expiration_days),
    )
    db.add(invitation)
    try:
        await db.commit()
    except IntegrityError:
        # Lost a race against a concurrent invitation for the same email; the
        # partial unique index on pending rows rejected our insert.
        await db.rollback()
        existing = await get_pending_invitation(db, organization_id, email)
        raise DuplicateInvitation(email, existing.id if existing else None)

    await db.refresh(invitation)
    logger.info("Invitation %s issued for %s in organization %s", invitation.id, email, organization_id)
    return invitation, raw_token

async def issue_bulk_invitations(
    db: AsyncSession,
    organization_id: uuid.UUID,
    entries: Iterable[InvitationBulkEntry],
    inviter_id: uuid.UUID,
) -> Tuple[BulkInvitationResult, List[Tuple[str, datetime, str]]]:
    """
    Issues each entry on its own, so one rejected address does not undo the
    others. Returns the per-email report plus (email, expires_at, raw_token) for each
    issued invitation, for the caller to notify. Plain values, since a later
    entry's rollback expires the loaded instances.
    """
    entries = list(entries)
    if len(entries) > settings.INVITATION_BULK_MAX:
        raise ValidationError(
            f"At most {settings.INVITATION_BULK_MAX} invitations per request",
            {"max_invitations": settings.INVITATION_BULK_MAX},
        )

    inviter = await membership_service.get_profile(db, inviter_id)
    _require_manager(inviter, organization_id)

    results: List[BulkInvitationItemResult] = []
    issued: List[Tuple[str, datetime, str]] = []
    for entry in entries:
        try:
            invitation, raw_token = await issue_invitation(db, organization_id, entry.email, entry.role, inviter_id)
        except ADSappError as e:
            results.append(BulkInvitationItemResult(
                email=entry.email, success=False, error_type=e.error_type, error=e.message,
            ))
            continue
        issued.append((invitation.email, invitation.expires_at, raw_token))
        results.append(BulkInvitationItemResult(email=invitation.email, success=True, invitation_id=invitation.id))

    report = BulkInvitationResult(
        total_invitations=len(entries),
        successful_invitations=len(issued),
        failed_invitations=len(entries) - len(issued),
        results=results,
    )
    logger.info(
        "Bulk invitation for organization %s: %s issued, %s failed",
        organization_id, report.successful_invitations, report.failed_invitations,
    )
    return report, issued

async def accept_invitation(db: AsyncSession, raw_token: str, identity: CurrentIdentity) -> Tuple[TeamInvitation, Profile]:
    """
    Accepts a pending invitation for the authenticated user. Seat claim,
    profile creation and the status change commit together or not at all.
    """
    try:
        result = await db.execute(
            select(TeamInvitation)
            .where(TeamInvitation.token_hash == hash_token(raw_token))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        invitation = result.scalars().first()
        if invitation is None:
            raise InvitationNotFound("Invalid invitation token")

        _require_pending(invitation)

        now = _utcnow()
        if is_expired(invitation, now):
            invitation.status = EXPIRED
            await db.commit()
            logger.info("Invitation %s expired on acceptance attempt", invitation.id)
            raise InvitationExpired()

        existing_profile = await membership_service.get_profile(db, identity.id)
        if existing_profile is not None:
            if existing_profile.organization_id == invitation.organization_id:
                raise AlreadyMember("You are already a member of this organization")
            if existing_profile.role == ProfileRoleEnum.OWNER.value:
                raise AuthorizationError(
                    "Organization owners must transfer ownership before joining another organization"
                )

        profile = await membership_service.add_member(
            db,
            organization_id=invitation.organization_id,
            user_id=identity.id,
            email=identity.email,
            role=PROFILE_ROLE_FOR_INVITATION[invitation.role],
            full_name=identity.full_name,
        )

        invitation.status = InvitationStatusEnum.ACCEPTED.value
        invitation.accepted_at = now
        invitation.accepted_by = profile.id
        await db.commit()
    except Exception:
        await db.rollback()
        raise

    await db.refresh(invitation)
    await db.refresh(profile)
    logger.info("Invitation %s accepted by profile %s", invitation.id, profile.id)
    return invitation, profile

async def revoke_invitation(
    db: AsyncSession,
    invitation_id: uuid.UUID,
    organization_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> TeamInvitation:
    actor = await membership_service.get_profile(db, actor_id)
    _require_manager(actor, organization_id)

    result = await db.execute(
        update(TeamInvitation)
        .where(
            TeamInvitation.id == invitation_id,
            TeamInvitation.organization_id == organization_id,
            TeamInvitation.status == PENDING,
        )
        .values(status=InvitationStatusEnum.REVOKED.value)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        await db.rollback()
        raise InvitationNotFound("No pending invitation with this id")
    await db.commit()

    invitation = await get_invitation(db, invitation_id, organization_id)
    await db.refresh(invitation)
    logger.info("Invitation %s revoked by %s", invitation_id, actor_id)
    return invitation

async def resend_invitation(
    db: AsyncSession,
    invitation_id: uuid.UUID,
    organization_id: uuid.UUID,
    actor_id: uuid.UUID,
) -> Tuple[TeamInvitation, str]:
    """
    Rotates the token of a pending invitation so a fresh link can be emailed.
    The previous link stops working.
    """
    actor = await membership_service.get_profile(db, actor_id)
    _require_manager(actor, organization_id)

    invitation = await get_invitation(db, invitation_id, organization_id)
    if invitation is None:
        raise InvitationNotFound()
    if invitation.status == EXPIRED:
        raise InvitationExpired("Cannot resend an expired invitation")
    _require_pending(invitation)

    now = _utcnow()
    if is_expired(invitation, now):
        invitation.status = EXPIRED
        await db.commit()
        raise InvitationExpired("Cannot resend an expired invitation")

    invitation_settings = await invitation_settings_service.get_invitation_settings(db, organization_id)
    if invitation.reminders_sent >= invitation_settings.max_reminders:
        raise ReminderLimitReached(invitation_settings.max_reminders)

    raw_token = _rotate_token(invitation, now)
    await db.commit()
    await db.refresh(invitation)
    logger.info("Invitation %s resent (%s reminders)", invitation.id, invitation.reminders_sent)
    return invitation, raw_token

async def send_scheduled_reminders(
    db: AsyncSession,
    email_service: EmailService,
    now: Optional[datetime] = None,
) -> int:
    """
    Emails a reminder with a fresh link for every pending invitation whose
    organization has auto reminders on, that is still under its reminder
    limit, and whose last reminder (or creation) is at least
    ``reminder_interval_days`` old. Returns the number of reminders delivered.
    """
    now = now or _utcnow()
    result = await db.execute(
        select(TeamInvitation, Organization.name, InvitationSettings)
        .join(Organization, Organization.id == TeamInvitation.organization_id)
        .outerjoin(InvitationSettings, InvitationSettings.organization_id == TeamInvitation.organization_id)
        .where(TeamInvitation.status == PENDING, TeamInvitation.expires_at >= now)
        .order_by(TeamInvitation.created_at)
        .execution_options(populate_existing=True)
    )

    due = []
    for invitation, organization_name, settings_row in result.all():
        invitation_settings = invitation_settings_service.effective_settings(invitation.organization_id, settings_row)
        if not invitation_settings.auto_reminders:
            continue
        if invitation.reminders_sent >= invitation_settings.max_reminders:
            continue
        last_contact = _as_utc(invitation.last_reminder_at or invitation.created_at)
        if now - last_contact < timedelta(days=invitation_settings.reminder_interval_days):
            continue
        due.append((invitation.id, invitation.email, invitation.reminders_sent, invitation.expires_at, organization_name))

    delivered = 0
    for invitation_id, email, reminders_sent, expires_at, organization_name in due:
        raw_token, token_hash = generate_token()
        # Guarded on the count we read, so a concurrent manual resend or an
        # acceptance in between wins and this reminder is skipped.
        rotated = await db.execute(
            update(TeamInvitation)
            .where(
                TeamInvitation.id == invitation_id,
                TeamInvitation.status == PENDING,
                TeamInvitation.reminders_sent == reminders_sent,
            )
            .values(token_hash=token_hash, reminders_sent=reminders_sent + 1, last_reminder_at=now)
            .execution_options(synchronize_session=False)
        )
        await db.commit()
        if rotated.rowcount == 0:
            continue
        if send_invitation_email(
            email_service, email, organization_name, raw_token, is_reminder=True, expires_at=_as_utc(expires_at)
        ):
            delivered += 1

    if due:
        logger.info("Scheduled reminders: %s due, %s delivered", len(due), delivered)
    return delivered

async def expire_stale_invitations(db: AsyncSession, now: Optional[datetime] = None) -> int:
    """
    Moves every pending invitation whose expiry has passed to expired.
    Idempotent: a second run finds nothing left to change.
    """
    now = now or _utcnow()
    result = await db.execute(
        update(TeamInvitation)
        .where(TeamInvitation.status == PENDING, TeamInvitation.expires_at < now)
        .values(status=EXPIRED)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    expired = result.rowcount or 0
    if expired:
        logger.info("Expired %s stale invitations", expired)
    return expired
