# This file serves as the central point for all our models.
# By importing them here, we ensure that SQLAlchemy's metadata
# is aware of all tables when the application starts.

from .base import Base
from .organization import Organization
from .profile import Profile, ProfileRoleEnum
from .team_invitation import TeamInvitation, InvitationRoleEnum, InvitationStatusEnum
from .invitation_settings import InvitationSettings
