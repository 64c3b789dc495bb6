# backend/adsapp/core/celery_app.py
from celery import Celery
from adsapp.core.config import settings

celery_app = Celery(
    "adsapp_tasks",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
)

celery_app.conf.update(
    # Basic settings
    imports=(
        'adsapp.background.tasks',
    ),
    task_track_started=True,
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,

    # Threads pool avoids fork-related issues with the async engine
    worker_pool='threads',
    worker_concurrency=2,

    # Reliability settings
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
    task_soft_time_limit=300,
    task_time_limit=600,

    # Connection settings
    broker_connection_retry_on_startup=True,

    # Periodic expiry sweep and reminders (run with `celery -A adsapp.worker beat`)
    beat_schedule={
        'expire-stale-invitations': {
            'task': 'adsapp.background.tasks.expire_stale_invitations_task',
            'schedule': settings.INVITATION_SWEEP_INTERVAL_MINUTES * 60.0,
        },
        'send-invitation-reminders': {
            'task': 'adsapp.background.tasks.send_invitation_reminders_task',
            'schedule': settings.INVITATION_REMINDER_CHECK_MINUTES * 60.0,
        },
    },
)
