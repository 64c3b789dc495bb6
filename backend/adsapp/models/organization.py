import uuid
from sqlalchemy import Column, String, Integer, DateTime, CheckConstraint, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from adsapp.models.base import Base

class Organization(Base):
    __tablename__ = 'organizations'
    __table_args__ = (
        CheckConstraint('max_team_members > 0', name='check_max_team_members'),
        CheckConstraint('used_team_members >= 0', name='check_used_team_members'),
        CheckConstraint('used_team_members <= max_team_members', name='check_used_within_max'),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String, nullable=False)
    slug = Column(String(63), unique=True, index=True, nullable=False)

    # License seats. used_team_members is only ever changed by the atomic
    # UPDATE statements in membership_service.
    max_team_members = Column(Integer, nullable=False, default=1, server_default='1')
    used_team_members = Column(Integer, nullable=False, default=1, server_default='1')

    # WhatsApp Business credentials (opaque, never serialized)
    whatsapp_business_account_id = Column(String, nullable=True)
    whatsapp_phone_number_id = Column(String, nullable=True)
    whatsapp_access_token = Column(String, nullable=True)
    whatsapp_webhook_verify_token = Column(String, nullable=True)

    subscription_tier = Column(String, nullable=False, default='starter')
    subscription_status = Column(String, nullable=False, default='trial')

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    profiles = relationship("Profile", back_populates="organization", passive_deletes=True)
    invitations = relationship("TeamInvitation", back_populates="organization", passive_deletes=True)
    invitation_settings = relationship("InvitationSettings", back_populates="organization", uselist=False, passive_deletes=True)
