"""initial tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    # Users and login sessions
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('role', sa.String(50), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('has_coaching_access', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_login', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'sessions',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('token', sa.String(255), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('last_activity', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_sessions_user_id', 'sessions', ['user_id'])
    op.create_index('ix_sessions_token', 'sessions', ['token'], unique=True)
    op.create_index('ix_sessions_expires_at', 'sessions', ['expires_at'])

    # Wellness tracking
    op.create_table(
        'health_assessments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('assessment_type', sa.String(20), nullable=False),
        sa.Column('score', sa.Integer(), nullable=False),
        sa.Column('responses', JSONType, nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint("assessment_type IN ('mental', 'physical', 'cognitive')"),
    )
    op.create_index('ix_health_assessments_user_id', 'health_assessments', ['user_id'])

    op.create_table(
        'journal_entries',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('mood', sa.String(20), nullable=True),
        sa.Column('prompt', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_journal_entries_user_id', 'journal_entries', ['user_id'])
    op.create_index('ix_journal_entries_created_at', 'journal_entries', ['created_at'])

    op.create_table(
        'goals',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(50), nullable=False),
        sa.Column('target_value', sa.Integer(), nullable=True),
        sa.Column('current_value', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('target_date', sa.DateTime(), nullable=True),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_goals_user_id', 'goals', ['user_id'])

    op.create_table(
        'habits',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('frequency', sa.String(20), nullable=False),
        sa.Column('streak', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_completed', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint("frequency IN ('daily', 'weekly')"),
    )
    op.create_index('ix_habits_user_id', 'habits', ['user_id'])

    op.create_table(
        'mood_entries',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('mood', sa.String(50), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_mood_entries_user_id', 'mood_entries', ['user_id'])
    op.create_index('ix_mood_entries_created_at', 'mood_entries', ['created_at'])

    # Coaching programme progress
    op.create_table(
        'coaching_progress',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('module_id', sa.String(50), nullable=False),
        sa.Column('component_id', sa.String(100), nullable=False),
        sa.Column('completed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('completed_at', sa.DateTime(), nullable=True),
        sa.Column('progress', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('response_data', JSONType, nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('user_id', 'module_id', 'component_id', name='uq_coaching_progress_component'),
    )
    op.create_index('ix_coaching_progress_user_id', 'coaching_progress', ['user_id'])
    op.create_index('idx_coaching_progress_user_week', 'coaching_progress', ['user_id', 'week_number'])

    # Lead funnel
    op.create_table(
        'leads',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(255), nullable=True),
        sa.Column('last_name', sa.String(255), nullable=True),
        sa.Column('source', sa.String(100), nullable=False),
        sa.Column('lead_magnet', sa.String(100), nullable=True),
        sa.Column('utm_source', sa.String(100), nullable=True),
        sa.Column('utm_medium', sa.String(100), nullable=True),
        sa.Column('utm_campaign', sa.String(100), nullable=True),
        sa.Column('lead_score', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(20), nullable=False, server_default='active'),
        sa.Column('last_engaged', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('converted_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("status IN ('active', 'converted', 'unsubscribed')"),
    )
    op.create_index('ix_leads_email', 'leads', ['email'], unique=True)
    op.create_index('ix_leads_status', 'leads', ['status'])
    op.create_index('ix_leads_created_at', 'leads', ['created_at'])

    op.create_table(
        'conversion_events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('event_data', JSONType, nullable=True),
        sa.Column('value', sa.Numeric(10, 2), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_conversion_events_lead_id', 'conversion_events', ['lead_id'])
    op.create_index('ix_conversion_events_event_type', 'conversion_events', ['event_type'])
    op.create_index('ix_conversion_events_timestamp', 'conversion_events', ['timestamp'])

    op.create_table(
        'scheduled_emails',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('subject', sa.String(255), nullable=False),
        sa.Column('template_type', sa.String(100), nullable=False),
        sa.Column('fire_at', sa.DateTime(), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('attempts', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('processed_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('lead_id', 'template_type', name='uq_scheduled_emails_lead_template'),
        sa.CheckConstraint("status IN ('pending', 'sent', 'skipped', 'failed', 'cancelled')"),
    )
    op.create_index('ix_scheduled_emails_lead_id', 'scheduled_emails', ['lead_id'])
    op.create_index('idx_scheduled_emails_due', 'scheduled_emails', ['status', 'fire_at'])

    op.create_table(
        'email_sends',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('scheduled_email_id', sa.Integer(), nullable=True),
        sa.Column('template_type', sa.String(100), nullable=True),
        sa.Column('subject', sa.String(255), nullable=True),
        sa.Column('opened', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('clicked', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sent_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['scheduled_email_id'], ['scheduled_emails.id'], ondelete='SET NULL'),
    )
    op.create_index('ix_email_sends_lead_id', 'email_sends', ['lead_id'])


def downgrade() -> None:
    op.drop_table('email_sends')
    op.drop_table('scheduled_emails')
    op.drop_table('conversion_events')
    op.drop_table('leads')
    op.drop_table('coaching_progress')
    op.drop_table('mood_entries')
    op.drop_table('habits')
    op.drop_table('goals')
    op.drop_table('journal_entries')
    op.drop_table('health_assessments')
    op.drop_table('sessions')
    op.drop_table('users')
