"""Training academy schema

Revision ID: 0001
Revises: 
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Course catalog
    op.create_table(
        'training_courses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('tier', sa.String(20), nullable=False),
        sa.Column('content_type', sa.String(20), nullable=False, default='reading'),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('order_index', sa.Integer(), nullable=False, default=0),
        sa.Column('is_mandatory', sa.Boolean(), nullable=False, default=True),
        sa.Column('is_capstone', sa.Boolean(), nullable=False, default=False),
        sa.Column('quiz', sa.JSON(), nullable=True),
        sa.Column('pass_mark_percent', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_training_courses_tier_order', 'training_courses', ['tier', 'order_index'])

    # Per-staff course progress
    op.create_table(
        'training_progress',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('staff_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('course_id', sa.Uuid(), sa.ForeignKey('training_courses.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('status', sa.String(20), nullable=False, default='not_started'),
        sa.Column('progress_percent', sa.Integer(), nullable=False, default=0),
        sa.Column('last_quiz_score', sa.Integer(), nullable=True),
        sa.Column('quiz_attempts', sa.Integer(), nullable=False, default=0),
        sa.Column('quiz_passed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('staff_id', 'course_id', name='uq_training_progress_staff_course'),
    )

    # Capstone reflections
    op.create_table(
        'training_reflections',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('staff_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('course_id', sa.Uuid(), sa.ForeignKey('training_courses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('what_learned', sa.Text(), nullable=False),
        sa.Column('connected_value', sa.String(100), nullable=False),
        sa.Column('connected_value_why', sa.Text(), nullable=True),
        sa.Column('proud_moment', sa.Text(), nullable=False),
        sa.Column('concerns', sa.Text(), nullable=True),
        sa.Column('suggestions', sa.Text(), nullable=True),
        sa.Column('visibility', sa.String(20), nullable=False, default='public'),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('staff_id', 'course_id', name='uq_training_reflections_staff_course'),
    )

    # Tier certificates
    op.create_table(
        'training_certificates',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('staff_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('staff_name', sa.String(255), nullable=True),
        sa.Column('tier', sa.String(20), nullable=False),
        sa.Column('tier_name', sa.String(100), nullable=False),
        sa.Column('certificate_number', sa.String(100), nullable=False),
        sa.Column('quiz_score', sa.Integer(), nullable=False),
        sa.Column('issued_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('staff_id', 'tier', name='uq_training_certificates_staff_tier'),
        sa.UniqueConstraint('certificate_number', name='uq_training_certificates_number'),
    )

    # Onboarding journey
    op.create_table(
        'training_journeys',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('staff_id', sa.Uuid(), nullable=False, unique=True, index=True),
        sa.Column('values_completed', sa.Boolean(), nullable=False, default=False),
        sa.Column('hygiene_completed', sa.Boolean(), nullable=False, default=False),
        sa.Column('certified', sa.Boolean(), nullable=False, default=False),
        sa.Column('certificate_issued_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_step', sa.String(20), nullable=False, default='values'),
        sa.Column('last_updated', sa.DateTime(timezone=True), nullable=True),
    )

    # Audit log
    op.create_table(
        'event_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('event_type', sa.String(100), nullable=False, index=True),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('staff_id', sa.Uuid(), nullable=False, index=True),
        sa.Column('actor_id', sa.Uuid(), nullable=True),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False, index=True),
    )
    op.create_index('ix_event_logs_entity', 'event_logs', ['entity_type', 'entity_id'])
    op.create_index('ix_event_logs_staff_time', 'event_logs', ['staff_id', 'created_at'])


def downgrade() -> None:
    op.drop_index('ix_event_logs_staff_time', table_name='event_logs')
    op.drop_index('ix_event_logs_entity', table_name='event_logs')
    op.drop_table('event_logs')
    op.drop_table('training_journeys')
    op.drop_table('training_certificates')
    op.drop_table('training_reflections')
    op.drop_table('training_progress')
    op.drop_index('ix_training_courses_tier_order', table_name='training_courses')
    op.drop_table('training_courses')
