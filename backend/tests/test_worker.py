from adsapp.core.config import settings
from adsapp.worker import celery_app


def test_invitation_sweep_is_scheduled():
    entry = celery_app.conf.beat_schedule["expire-stale-invitations"]

    assert entry["task"] == "adsapp.background.tasks.expire_stale_invitations_task"
    assert entry["schedule"] == settings.INVITATION_SWEEP_INTERVAL_MINUTES * 60.0
    assert entry["task"] in celery_app.tasks


def test_invitation_reminders_are_scheduled():
    entry = celery_app.conf.beat_schedule["send-invitation-reminders"]

    assert entry["task"] == "adsapp.background.tasks.send_invitation_reminders_task"
    assert entry["schedule"] == settings.INVITATION_REMINDER_CHECK_MINUTES * 60.0
    assert entry["task"] in celery_app.tasks
