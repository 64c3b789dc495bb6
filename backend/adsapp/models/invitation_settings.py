from sqlalchemy import Column, Integer, Boolean, DateTime, ForeignKey, JSON, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from adsapp.models.base import Base

class InvitationSettings(Base):
    """
    Per-organization invitation policy. Organizations without a row use the
    global defaults from core.config.
    """
    __tablename__ = 'invitation_settings'
    __table_args__ = (
        CheckConstraint('default_expiration_days > 0', name='check_default_expiration_days'),
        CheckConstraint('max_reminders >= 0', name='check_max_reminders'),
        CheckConstraint('reminder_interval_days > 0', name='check_reminder_interval_days'),
    )

    organization_id = Column(UUID(as_uuid=True), ForeignKey('organizations.id', ondelete='CASCADE'), primary_key=True)

    default_expiration_days = Column(Integer, nullable=False, default=7)
    max_reminders = Column(Integer, nullable=False, default=3)
    reminder_interval_days = Column(Integer, nullable=False, default=2)
    auto_reminders = Column(Boolean, nullable=False, default=False)

    # Lowercase domains, e.g. ["acme.com"]. An empty allow list allows everything.
    allowed_domains = Column(JSON, nullable=False, default=list)
    restricted_domains = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    organization = relationship("Organization", back_populates="invitation_settings")
