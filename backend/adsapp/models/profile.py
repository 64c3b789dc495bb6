import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from adsapp.models.base import Base

class ProfileRoleEnum(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    AGENT = "agent"

# Roles allowed to manage the team (invite, revoke, remove members)
MANAGER_ROLES = {ProfileRoleEnum.OWNER.value, ProfileRoleEnum.ADMIN.value}

class Profile(Base):
    __tablename__ = 'profiles'

    # Same value as the Supabase auth user id
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True)

    email = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=True)
    role = Column(String, nullable=False, default=ProfileRoleEnum.AGENT.value)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    organization = relationship("Organization", back_populates="profiles")

    @property
    def can_manage_team(self) -> bool:
        return self.role in MANAGER_ROLES
