from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from adsapp.core.dependencies import verify_internal_secret
from adsapp.database import get_db
from adsapp.services import invitation_service
from adsapp.services.email_service import EmailService, get_email_service

router = APIRouter(dependencies=[Depends(verify_internal_secret)])

@router.post("/invitations/sweep-expired")
async def sweep_expired_invitations(db: AsyncSession = Depends(get_db)):
    """
    Called by the scheduler. Moves every overdue pending invitation to expired.
    """
    expired = await invitation_service.expire_stale_invitations(db)
    return {"expired": expired}

@router.post("/invitations/send-reminders")
async def send_invitation_reminders(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    """
    Called by the scheduler. Emails due reminders for organizations with auto reminders on.
    """
    sent = await invitation_service.send_scheduled_reminders(db, email_service)
    return {"reminders_sent": sent}
