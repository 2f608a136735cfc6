"""Family RSVP schema: household graph, family and public RSVPs, activity log

Revision ID: 3c1f9a7d2e40
Revises: 
Create Date: 2026-10-19 09:12:04.118532

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '3c1f9a7d2e40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    role_enum = postgresql.ENUM('member', 'admin', name='roleenum', create_type=False)
    answer_enum = postgresql.ENUM('yes', 'maybe', 'no', name='rsvpanswer', create_type=False)
    participant_enum = postgresql.ENUM('adult', 'youth', name='participanttype', create_type=False)
    role_enum.create(op.get_bind(), checkfirst=True)
    answer_enum.create(op.get_bind(), checkfirst=True)
    participant_enum.create(op.get_bind(), checkfirst=True)

    op.create_table(
        'adults',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('role', role_enum, nullable=False, server_default='member'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_adults_email', 'adults', ['email'])

    op.create_table(
        'youths',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    op.create_table(
        'caregiver_links',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('adult_id', sa.Integer, sa.ForeignKey('adults.id', ondelete='CASCADE'), nullable=False),
        sa.Column('youth_id', sa.Integer, sa.ForeignKey('youths.id', ondelete='CASCADE'), nullable=False),
        sa.UniqueConstraint('adult_id', 'youth_id', name='uq_caregiver_adult_youth'),
    )
    op.create_index('idx_caregiver_adult', 'caregiver_links', ['adult_id'])
    op.create_index('idx_caregiver_youth', 'caregiver_links', ['youth_id'])

    op.create_table(
        'events',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('starts_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('capacity', sa.Integer, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_event_date', 'events', ['starts_at'])

    # No unique (event_id, created_by_adult_id): one-per-family is enforced by the resolver
    op.create_table(
        'rsvps',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('event_id', sa.Integer, sa.ForeignKey('events.id'), nullable=False),
        sa.Column('created_by_adult_id', sa.Integer, sa.ForeignKey('adults.id'), nullable=False),
        sa.Column('entered_by_adult_id', sa.Integer, sa.ForeignKey('adults.id'), nullable=True),
        sa.Column('answer', answer_enum, nullable=False, server_default='yes'),
        sa.Column('comment', sa.Text, nullable=True),
        sa.Column('n_guests', sa.Integer, nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_rsvp_event_creator', 'rsvps', ['event_id', 'created_by_adult_id'])
    op.create_index('idx_rsvp_event_answer', 'rsvps', ['event_id', 'answer'])

    op.create_table(
        'rsvp_members',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('rsvp_id', sa.Integer, sa.ForeignKey('rsvps.id', ondelete='CASCADE'), nullable=False),
        sa.Column('event_id', sa.Integer, sa.ForeignKey('events.id'), nullable=False),
        sa.Column('participant_type', participant_enum, nullable=False),
        sa.Column('adult_id', sa.Integer, sa.ForeignKey('adults.id'), nullable=True),
        sa.Column('youth_id', sa.Integer, sa.ForeignKey('youths.id'), nullable=True),
        sa.CheckConstraint(
            "(participant_type = 'adult' AND adult_id IS NOT NULL AND youth_id IS NULL) OR "
            "(participant_type = 'youth' AND youth_id IS NOT NULL AND adult_id IS NULL)",
            name='ck_rsvp_member_kind',
        ),
    )
    op.create_index('idx_rsvp_member_rsvp', 'rsvp_members', ['rsvp_id'])
    op.create_index('idx_rsvp_member_event_type', 'rsvp_members', ['event_id', 'participant_type'])

    op.create_table(
        'public_rsvps',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('event_id', sa.Integer, sa.ForeignKey('events.id'), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('total_adults', sa.Integer, nullable=False, server_default='0'),
        sa.Column('total_kids', sa.Integer, nullable=False, server_default='0'),
        sa.Column('answer', answer_enum, nullable=False, server_default='yes'),
        sa.Column('comment', sa.Text, nullable=True),
        sa.Column('token_hash', sa.String(64), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_public_rsvp_event_answer', 'public_rsvps', ['event_id', 'answer'])

    op.create_table(
        'activity_log',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('adult_id', sa.Integer, nullable=True),
        sa.Column('action_type', sa.String(64), nullable=False),
        sa.Column('details', sa.JSON, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('idx_activity_action', 'activity_log', ['action_type'])
    op.create_index('idx_activity_adult', 'activity_log', ['adult_id'])


def downgrade() -> None:
    op.drop_table('activity_log')
    op.drop_table('public_rsvps')
    op.drop_table('rsvp_members')
    op.drop_table('rsvps')
    op.drop_table('events')
    op.drop_table('caregiver_links')
    op.drop_table('youths')
    op.drop_table('adults')

    sa.Enum(name='participanttype').drop(op.get_bind())
    sa.Enum(name='rsvpanswer').drop(op.get_bind())
    sa.Enum(name='roleenum').drop(op.get_bind())
