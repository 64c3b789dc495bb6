import asyncio
import logging

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession

from adsapp.core.config import settings
from adsapp.core.celery_app import celery_app
from adsapp.services import invitation_service
from adsapp.services.email_service import EmailService

logger = logging.getLogger(__name__)

def run_async_task(async_func, *args, **kwargs):
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(async_func(*args, **kwargs))
    finally:
        tasks = asyncio.all_tasks(loop=loop)
        for task in tasks: task.cancel()
        if tasks: loop.run_until_complete(asyncio.gather(*tasks, return_exceptions=True))
        loop.close()
        asyncio.set_event_loop(None)

async def _async_expire_stale_invitations() -> int:
    # A task-local engine, since the pool is bound to this task's event loop
    engine = create_async_engine(settings.DATABASE_URL)
    AsyncSessionLocal_Task = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    try:
        async with AsyncSessionLocal_Task() as db:
            return await invitation_service.expire_stale_invitations(db)
    finally:
        await engine.dispose()

# --- CELERY TASK DEFINITIONS ---
@celery_app.task(name='adsapp.background.tasks.expire_stale_invitations_task')
def expire_stale_invitations_task() -> int:
    """Periodic sweep; the beat schedule lives in celery_app."""
    expired = run_async_task(_async_expire_stale_invitations)
    logger.info("Invitation sweep finished: %s expired", expired)
    return expired

async def _async_send_invitation_reminders() -> int:
    engine = create_async_engine(settings.DATABASE_URL)
    AsyncSessionLocal_Task = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    try:
        async with AsyncSessionLocal_Task() as db:
            return await invitation_service.send_scheduled_reminders(db, EmailService())
    finally:
        await engine.dispose()

@celery_app.task(name='adsapp.background.tasks.send_invitation_reminders_task')
def send_invitation_reminders_task() -> int:
    sent = run_async_task(_async_send_invitation_reminders)
    logger.info("Invitation reminders finished: %s sent", sent)
    return sent
