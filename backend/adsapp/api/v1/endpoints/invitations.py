from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from adsapp.schemas.invitation import (
    BulkInvitationResult,
    Invitation,
    InvitationAccept,
    InvitationAcceptResponse,
    InvitationBulkCreate,
    InvitationCreate,
)
from adsapp.schemas.profile import CurrentIdentity
from adsapp.models.profile import Profile
from adsapp.models.team_invitation import InvitationRoleEnum, InvitationStatusEnum
from adsapp.core.dependencies import get_current_identity, get_current_profile, require_team_manager
from adsapp.database import get_db
from adsapp.services import invitation_service, organization_service
from adsapp.services.email_service import EmailService, get_email_service, send_invitation_email, send_welcome_email

router = APIRouter()

@router.post("/", response_model=Invitation, status_code=status.HTTP_201_CREATED)
async def create_invitation(
    invitation_in: InvitationCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(require_team_manager),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Invite someone to the caller's organization.
    The token only travels inside the emailed link, never in this response.
    """
    organization = await organization_service.get_organization(db, current_profile.organization_id)
    invitation, raw_token = await invitation_service.issue_invitation(
        db=db,
        organization_id=current_profile.organization_id,
        email=invitation_in.email,
        role=invitation_in.role,
        inviter_id=current_profile.id,
    )
    background_tasks.add_task(
        send_invitation_email, email_service, invitation.email, organization.name, raw_token,
        expires_at=invitation.expires_at,
    )
    return invitation

@router.post("/bulk", response_model=BulkInvitationResult)
async def create_bulk_invitations(
    bulk_in: InvitationBulkCreate,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(require_team_manager),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Invite several people at once. Each address succeeds or fails on its own;
    the response reports the outcome per email.
    """
    # Read up front; a rolled-back entry expires loaded instances
    organization_name = (await organization_service.get_organization(db, current_profile.organization_id)).name
    report, issued = await invitation_service.issue_bulk_invitations(
        db=db,
        organization_id=current_profile.organization_id,
        entries=bulk_in.invitations,
        inviter_id=current_profile.id,
    )
    for email, expires_at, raw_token in issued:
        background_tasks.add_task(
            send_invitation_email, email_service, email, organization_name, raw_token, expires_at=expires_at
        )
    return report

@router.get("/", response_model=List[Invitation])
async def list_invitations(
    status: Optional[InvitationStatusEnum] = Query(default=None),
    role: Optional[InvitationRoleEnum] = Query(default=None),
    email: Optional[str] = Query(default=None, max_length=320),
    limit: int = Query(default=invitation_service.DEFAULT_PAGE_SIZE, ge=1, le=200),
    offset: int = Query(default=0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(get_current_profile),
):
    """
    List invitations of the caller's organization, newest first.
    """
    return await invitation_service.list_invitations(
        db=db,
        organization_id=current_profile.organization_id,
        status=status,
        role=role,
        email=email,
        limit=limit,
        offset=offset,
    )

@router.post("/accept", response_model=InvitationAcceptResponse)
async def accept_invitation(
    accept_in: InvitationAccept,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    identity: CurrentIdentity = Depends(get_current_identity),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Accept an invitation as the authenticated user, creating or moving their profile.
    """
    invitation, profile = await invitation_service.accept_invitation(db, accept_in.token, identity)
    organization = await organization_service.get_organization(db, profile.organization_id)
    background_tasks.add_task(
        send_welcome_email, email_service, profile.email, organization.name, profile.full_name
    )
    return InvitationAcceptResponse(
        organization_id=profile.organization_id,
        profile_id=profile.id,
        role=profile.role,
        invitation_id=invitation.id,
    )

@router.delete("/{invitation_id}", response_model=Invitation)
async def revoke_invitation(
    invitation_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(require_team_manager),
):
    """
    Revoke a pending invitation. Its link stops working immediately.
    """
    return await invitation_service.revoke_invitation(
        db=db,
        invitation_id=invitation_id,
        organization_id=current_profile.organization_id,
        actor_id=current_profile.id,
    )

@router.post("/{invitation_id}/resend", response_model=Invitation)
async def resend_invitation(
    invitation_id: uuid.UUID,
    background_tasks: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
    current_profile: Profile = Depends(require_team_manager),
    email_service: EmailService = Depends(get_email_service),
):
    organization = await organization_service.get_organization(db, current_profile.organization_id)
    invitation, raw_token = await invitation_service.resend_invitation(
        db=db,
        invitation_id=invitation_id,
        organization_id=current_profile.organization_id,
        actor_id=current_profile.id,
    )
    background_tasks.add_task(
        send_invitation_email, email_service, invitation.email, organization.name, raw_token,
        is_reminder=True, expires_at=invitation.expires_at,
    )
    return invitation
