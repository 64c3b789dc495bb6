import logging
import smtplib
from datetime import datetime
from html import escape
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional
from urllib.parse import urlencode

from adsapp.core.config import settings

logger = logging.getLogger(__name__)

class EmailService:
    def __init__(self):
        self.smtp_server = settings.SMTP_SERVER
        self.smtp_port = settings.SMTP_PORT
        self.username = settings.SMTP_USERNAME
        self.password = settings.SMTP_PASSWORD
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME

    def send_email(
        self,
        to_emails: List[str],
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> bool:
        """
        Send an email over SMTP. Fire-and-forget: failures are logged and
        reported through the return value, never raised.
        """
        if not settings.SEND_EMAILS:
            logger.info("Email sending disabled. Would send %r to %s", subject, to_emails)
            return True

        try:
            message = MIMEMultipart("alternative")
            message["Subject"] = subject
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = ", ".join(to_emails)

            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            with smtplib.SMTP(self.smtp_server, self.smtp_port) as server:
                server.starttls()
                if self.username:
                    server.login(self.username, self.password)
                server.send_message(message)

            logger.info("Email %r sent to %s", subject, to_emails)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email %r to %s: %s", subject, to_emails, e)
            return False

def build_acceptance_link(raw_token: str) -> str:
    return f"{settings.APP_BASE_URL.rstrip('/')}/invitations/accept?{urlencode({'token': raw_token})}"

def send_invitation_email(
    email_service: EmailService,
    to_email: str,
    organization_name: str,
    raw_token: str,
    is_reminder: bool = False,
    expires_at: Optional[datetime] = None,
) -> bool:
    """
    Delivers the acceptance link. This is the only place the raw token leaves
    the process, so it must not be logged here.
    """
    link = build_acceptance_link(raw_token)
    prefix = "Reminder: " if is_reminder else ""
    subject = f"{prefix}You're invited to join {organization_name} on ADSapp"
    expiry_note = f"This link expires on {expires_at:%Y-%m-%d %H:%M} UTC." if expires_at else ""
    text_content = (
        f"You have been invited to join {organization_name} on ADSapp.\n\n"
        f"Accept the invitation: {link}\n\n"
        f"{expiry_note}"
    )
    html_content = (
        f"<p>You have been invited to join <strong>{escape(organization_name)}</strong> on ADSapp.</p>"
        f'<p><a href="{escape(link)}">Accept the invitation</a></p>'
        f"<p>{expiry_note}</p>"
    )
    sent = email_service.send_email([to_email], subject, html_content, text_content)
    if not sent:
        logger.warning("Invitation email to %s was not delivered; it can be resent", to_email)
    return sent


def send_welcome_email(
    email_service: EmailService,
    to_email: str,
    organization_name: str,
    full_name: Optional[str] = None,
) -> bool:
    greeting = f"Hi {full_name}," if full_name else "Hi,"
    subject = f"Welcome to {organization_name}!"
    text_content = (
        f"{greeting}\n\nYou have joined {organization_name} on ADSapp.\n\n"
        f"Sign in: {settings.APP_BASE_URL.rstrip('/')}/dashboard"
    )
    html_content = (
        f"<p>{escape(greeting)}</p>"
        f"<p>You have joined <strong>{escape(organization_name)}</strong> on ADSapp.</p>"
        f'<p><a href="{escape(settings.APP_BASE_URL.rstrip("/"))}/dashboard">Open your dashboard</a></p>'
    )
    return email_service.send_email([to_email], subject, html_content, text_content)

def get_email_service() -> EmailService:
    """FastAPI dependency so tests can swap in a recording fake."""
    return EmailService()
