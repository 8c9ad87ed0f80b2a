"""initial carbon footprint schema

Revision ID: 001
Revises: 
Create Date: 2026-10-16 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'profile',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('co2_emitted', sa.Float(), server_default='0', nullable=False),
        sa.Column('total_data_used_mb', sa.Float(), server_default='0', nullable=False),
        sa.Column('green_points', sa.Integer(), server_default='0', nullable=False),
    )
    op.create_index('ix_profile_green_points', 'profile', ['green_points'])

    op.create_table(
        'activity',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('activity_type', sa.Text(), nullable=False),
        sa.Column('size_mb', sa.Float(), nullable=False),
        sa.Column('co2_grams', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profile.id'], ),
        sa.CheckConstraint('size_mb > 0', name='ck_activity_size_positive'),
        sa.CheckConstraint('co2_grams >= 0', name='ck_activity_co2_non_negative'),
        sa.CheckConstraint("activity_type IN ('photo', 'message', 'video')", name='ck_activity_type'),
    )
    op.create_index('ix_activity_user_id', 'activity', ['user_id'])
    op.create_index('ix_activity_user_created', 'activity', ['user_id', 'created_at'])

    op.create_table(
        'weekly_history',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('co2_emitted_grams', sa.Float(), server_default='0', nullable=False),
        sa.Column('data_used_mb', sa.Float(), server_default='0', nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profile.id'], ),
        sa.UniqueConstraint('user_id', 'week_start', name='uq_weekly_history_user_week'),
    )
    op.create_index('ix_weekly_history_user_id', 'weekly_history', ['user_id'])

    op.create_table(
        'badge',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('badge_name', sa.Text(), nullable=False),
        sa.Column('badge_icon', sa.Text(), nullable=False),
        sa.Column('earned_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['profile.id'], ),
        sa.UniqueConstraint('user_id', 'badge_name', name='uq_badge_user_name'),
    )
    op.create_index('ix_badge_user_id', 'badge', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_badge_user_id', table_name='badge')
    op.drop_table('badge')
    op.drop_index('ix_weekly_history_user_id', table_name='weekly_history')
    op.drop_table('weekly_history')
    op.drop_index('ix_activity_user_created', table_name='activity')
    op.drop_index('ix_activity_user_id', table_name='activity')
    op.drop_table('activity')
    op.drop_index('ix_profile_green_points', table_name='profile')
    op.drop_table('profile')
