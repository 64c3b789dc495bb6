from sqlalchemy.orm import declarative_base

Base = declarative_base()

# Import all models here so that Alembic and SQLAlchemy know about them.
from adsapp.models.organization import Organization
from adsapp.models.profile import Profile
from adsapp.models.team_invitation import TeamInvitation
from adsapp.models.invitation_settings import InvitationSettings
