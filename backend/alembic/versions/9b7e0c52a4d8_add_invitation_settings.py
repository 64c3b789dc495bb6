"""Add per-organization invitation settings

Revision ID: 9b7e0c52a4d8
Revises: 4f2a9c1d7e31
Create Date: 2026-10-19 10:41:27.903114

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '9b7e0c52a4d8'
down_revision: Union[str, Sequence[str], None] = '4f2a9c1d7e31'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'invitation_settings',
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('default_expiration_days', sa.Integer(), nullable=False),
        sa.Column('max_reminders', sa.Integer(), nullable=False),
        sa.Column('reminder_interval_days', sa.Integer(), nullable=False),
        sa.Column('auto_reminders', sa.Boolean(), nullable=False),
        sa.Column('allowed_domains', sa.JSON(), nullable=False),
        sa.Column('restricted_domains', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('default_expiration_days > 0', name='check_default_expiration_days'),
        sa.CheckConstraint('max_reminders >= 0', name='check_max_reminders'),
        sa.CheckConstraint('reminder_interval_days > 0', name='check_reminder_interval_days'),
        sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('organization_id'),
    )


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('invitation_settings')
