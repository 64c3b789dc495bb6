"""Create organizations, profiles and team_invitations

Revision ID: 4f2a9c1d7e31
Revises:
Create Date: 2026-10-18 09:12:04.381522

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '4f2a9c1d7e31'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'organizations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(length=63), nullable=False),
        sa.Column('max_team_members', sa.Integer(), server_default='1', nullable=False),
        sa.Column('used_team_members', sa.Integer(), server_default='1', nullable=False),
        sa.Column('whatsapp_business_account_id', sa.String(), nullable=True),
        sa.Column('whatsapp_phone_number_id', sa.String(), nullable=True),
        sa.Column('whatsapp_access_token', sa.String(), nullable=True),
        sa.Column('whatsapp_webhook_verify_token', sa.String(), nullable=True),
        sa.Column('subscription_tier', sa.String(), nullable=False),
        sa.Column('subscription_status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('max_team_members > 0', name='check_max_team_members'),
        sa.CheckConstraint('used_team_members >= 0', name='check_used_team_members'),
        sa.CheckConstraint('used_team_members <= max_team_members', name='check_used_within_max'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_organizations_slug'), 'organizations', ['slug'], unique=True)

    op.create_table(
        'profiles',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )
    op.create_index(op.f('ix_profiles_organization_id'), 'profiles', ['organization_id'], unique=False)

    op.create_table(
        'team_invitations',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False),
        sa.Column('invited_by', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('token_hash', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('accepted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('accepted_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('reminders_sent', sa.Integer(), nullable=False),
        sa.Column('last_reminder_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint("role IN ('admin', 'member')", name='check_invitation_role'),
        sa.CheckConstraint("status IN ('pending', 'accepted', 'expired', 'revoked')", name='check_invitation_status'),
        sa.CheckConstraint('expires_at > created_at', name='check_invitation_expiry'),
        sa.CheckConstraint('accepted_at IS NULL OR accepted_at >= created_at', name='check_invitation_accepted_at'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['invited_by'], ['profiles.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['accepted_by'], ['profiles.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_team_invitations_organization_id'), 'team_invitations', ['organization_id'], unique=False)
    op.create_index(op.f('ix_team_invitations_email'), 'team_invitations', ['email'], unique=False)
    op.create_index(op.f('ix_team_invitations_status'), 'team_invitations', ['status'], unique=False)
    op.create_index(op.f('ix_team_invitations_token_hash'), 'team_invitations', ['token_hash'], unique=True)
    op.create_index('idx_team_invitations_expires_status', 'team_invitations', ['expires_at', 'status'], unique=False)
    op.create_index(
        'uq_team_invitations_pending_email',
        'team_invitations',
        ['organization_id', 'email'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_index('uq_team_invitations_pending_email', table_name='team_invitations')
    op.drop_index('idx_team_invitations_expires_status', table_name='team_invitations')
    op.drop_index(op.f('ix_team_invitations_token_hash'), table_name='team_invitations')
    op.drop_index(op.f('ix_team_invitations_status'), table_name='team_invitations')
    op.drop_index(op.f('ix_team_invitations_email'), table_name='team_invitations')
    op.drop_index(op.f('ix_team_invitations_organization_id'), table_name='team_invitations')
    op.drop_table('team_invitations')
    op.drop_index(op.f('ix_profiles_organization_id'), table_name='profiles')
    op.drop_table('profiles')
    op.drop_index(op.f('ix_organizations_slug'), table_name='organizations')
    op.drop_table('organizations')
