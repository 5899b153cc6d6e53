"""behavior events, email segments, sending status

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 12:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '002'
down_revision: Union[str, None] = '001'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")

# PostgreSQL's default name for the unnamed column check created in 001
STATUS_CHECK = 'scheduled_emails_status_check'


def upgrade() -> None:
    # Dispatch passes claim rows by moving them to 'sending'
    with op.batch_alter_table('scheduled_emails') as batch_op:
        batch_op.drop_constraint(STATUS_CHECK, type_='check')
        batch_op.create_check_constraint(
            STATUS_CHECK,
            "status IN ('pending', 'sending', 'sent', 'skipped', 'failed', 'cancelled')",
        )

    op.create_table(
        'behavior_events',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('session_id', sa.String(100), nullable=False),
        sa.Column('event_type', sa.String(100), nullable=False),
        sa.Column('event_data', JSONType, nullable=True),
        sa.Column('page_url', sa.String(500), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_behavior_events_lead_id', 'behavior_events', ['lead_id'])
    op.create_index('ix_behavior_events_event_type', 'behavior_events', ['event_type'])
    op.create_index('ix_behavior_events_timestamp', 'behavior_events', ['timestamp'])

    op.create_table(
        'email_segments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('conditions', JSONType, nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('lead_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index('ix_email_segments_name', 'email_segments', ['name'], unique=True)

    op.create_table(
        'email_segment_members',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('segment_id', sa.Integer(), nullable=False),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('added_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['segment_id'], ['email_segments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['lead_id'], ['leads.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('segment_id', 'lead_id', name='uq_email_segment_members_segment_lead'),
    )
    op.create_index('ix_email_segment_members_segment_id', 'email_segment_members', ['segment_id'])
    op.create_index('ix_email_segment_members_lead_id', 'email_segment_members', ['lead_id'])


def downgrade() -> None:
    op.drop_table('email_segment_members')
    op.drop_table('email_segments')
    op.drop_table('behavior_events')

    op.execute("UPDATE scheduled_emails SET status = 'pending' WHERE status = 'sending'")
    with op.batch_alter_table('scheduled_emails') as batch_op:
        batch_op.drop_constraint(STATUS_CHECK, type_='check')
        batch_op.create_check_constraint(
            STATUS_CHECK,
            "status IN ('pending', 'sent', 'skipped', 'failed', 'cancelled')",
        )
