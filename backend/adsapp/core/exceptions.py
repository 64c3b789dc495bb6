"""
Domain exceptions for team membership, invitations and license seats.

Every exception carries the HTTP status and error type it is rendered with by
``adsapp.core.errors``. Services raise them; routers never translate them by hand.
"""
from typing import Any, Dict, Optional


class ADSappError(Exception):
    """Base exception for all business-rule failures."""

    status_code: int = 400
    error_type: str = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationError(ADSappError):
    """Malformed input the client can correct (bad email, unknown role)."""
    status_code = 400
    error_type = "validation_error"


class EmailDomainNotAllowed(ValidationError):
    """The invitee's email domain is blocked by the organization's invitation settings."""
    error_type = "email_domain_not_allowed"

    def __init__(self, domain: str, reason: str):
        super().__init__(f"Email domain {domain} is {reason}", {"domain": domain})


class AuthorizationError(ADSappError):
    """Caller lacks the role required for the operation."""
    status_code = 403
    error_type = "authorization_error"


class OrganizationNotFound(ADSappError):
    status_code = 404
    error_type = "organization_not_found"

    def __init__(self, message: str = "Organization not found"):
        super().__init__(message)


class MemberNotFound(ADSappError):
    status_code = 404
    error_type = "member_not_found"

    def __init__(self, message: str = "Team member not found"):
        super().__init__(message)


class InvitationNotFound(ADSappError):
    status_code = 404
    error_type = "invitation_not_found"

    def __init__(self, message: str = "Invitation not found"):
        super().__init__(message)


class DuplicateInvitation(ADSappError):
    """A pending invitation already exists for this (organization, email)."""
    status_code = 409
    error_type = "duplicate_invitation"

    def __init__(self, email: str, existing_invitation_id=None):
        self.existing_invitation_id = existing_invitation_id
        details = {"email": email}
        if existing_invitation_id is not None:
            details["existing_invitation_id"] = str(existing_invitation_id)
        super().__init__(
            "A pending invitation already exists for this email in this organization",
            details,
        )


class AlreadyMember(ADSappError):
    status_code = 409
    error_type = "already_member"


class SlugTaken(ADSappError):
    status_code = 409
    error_type = "slug_taken"

    def __init__(self, slug: str):
        super().__init__(f"The slug '{slug}' is already in use", {"slug": slug})


class LicenseLimitExceeded(ADSappError):
    """
    No seat left in the organization.

    Carries the seat counts so the client can render "2 of 5 seats used".
    """
    status_code = 409
    error_type = "license_limit_exceeded"

    def __init__(self, available_seats: int, max_seats: int, used_seats: int):
        self.available_seats = available_seats
        self.max_seats = max_seats
        self.used_seats = used_seats
        super().__init__(
            f"License limit reached: {used_seats} of {max_seats} seats used. "
            "Upgrade your plan to add more team members.",
            {
                "available_seats": available_seats,
                "max_seats": max_seats,
                "used_seats": used_seats,
            },
        )


class InvitationNotPending(ADSappError):
    """The invitation was already resolved (accepted, revoked or expired)."""
    status_code = 409
    error_type = "invitation_not_pending"

    def __init__(self, status: str):
        self.status = status
        super().__init__(f"This invitation has already been {status}", {"status": status})


class InvitationExpired(ADSappError):
    """The invitation timed out before it was used."""
    status_code = 410
    error_type = "invitation_expired"

    def __init__(self, message: str = "This invitation has expired. Ask an administrator to send a new one."):
        super().__init__(message)


class ReminderLimitReached(ADSappError):
    status_code = 429
    error_type = "reminder_limit_reached"

    def __init__(self, max_reminders: int):
        super().__init__(
            "Maximum reminders reached for this invitation",
            {"max_reminders": max_reminders},
        )


class StoreUnavailable(ADSappError):
    """Transient database failure. The whole operation is safe to retry."""
    status_code = 503
    error_type = "store_unavailable"

    def __init__(self, message: str = "The data store is temporarily unavailable. Please retry."):
        super().__init__(message)
