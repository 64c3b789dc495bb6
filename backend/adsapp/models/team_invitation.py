import enum
import uuid
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, CheckConstraint, Index, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from adsapp.models.base import Base

class InvitationRoleEnum(str, enum.Enum):
    ADMIN = "admin"
    MEMBER = "member"

class InvitationStatusEnum(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    REVOKED = "revoked"

_PENDING_ONLY = text("status = 'pending'")

class TeamInvitation(Base):
    __tablename__ = 'team_invitations'
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'member')", name='check_invitation_role'),
        CheckConstraint("status IN ('pending', 'accepted', 'expired', 'revoked')", name='check_invitation_status'),
        CheckConstraint('expires_at > created_at', name='check_invitation_expiry'),
        CheckConstraint('accepted_at IS NULL OR accepted_at >= created_at', name='check_invitation_accepted_at'),
        # At most one pending invitation per (organization, email)
        Index(
            'uq_team_invitations_pending_email',
            'organization_id', 'email',
            unique=True,
            postgresql_where=_PENDING_ONLY,
            sqlite_where=_PENDING_ONLY,
        ),
        Index('idx_team_invitations_expires_status', 'expires_at', 'status'),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    organization_id = Column(UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True)

    email = Column(String, nullable=False, index=True) # stored lowercase
    role = Column(String, nullable=False, default=InvitationRoleEnum.MEMBER.value)
    invited_by = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False)
    status = Column(String, nullable=False, default=InvitationStatusEnum.PENDING.value, index=True)

    # SHA-256 of the token sent in the acceptance link. The raw token is never stored.
    token_hash = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    accepted_at = Column(DateTime(timezone=True), nullable=True)
    accepted_by = Column(UUID(as_uuid=True), ForeignKey('profiles.id', ondelete='SET NULL'), nullable=True)

    reminders_sent = Column(Integer, nullable=False, default=0)
    last_reminder_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    organization = relationship("Organization", back_populates="invitations")
