from .organization import Organization, OrganizationCreate, OrganizationWithLicenses
from .profile import Profile, CurrentIdentity
from .invitation import (
    Invitation,
    InvitationCreate,
    InvitationAccept,
    InvitationAcceptResponse,
    InvitationBulkCreate,
    BulkInvitationResult,
)
from .invitation_settings import InvitationSettings, InvitationSettingsUpdate
from .license import LicenseUsage
