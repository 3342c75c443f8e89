"""exercises, workouts, sets, personal records

Revision ID: 4b1d2c9e7a10
Revises:
Create Date: 2026-10-19 09:12:40.118402

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b1d2c9e7a10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# shared catalogue (user_id NULL), visible to everyone
CATALOGUE = [
    ("Back Squat", "Squat"),
    ("Bench Press", "Bench"),
    ("Deadlift", "DL"),
    ("Overhead Press", "OHP"),
    ("Front Squat", None),
    ("Barbell Row", "Row"),
    ("Romanian Deadlift", "RDL"),
    ("Pull Up", None),
]


def upgrade() -> None:
    # 1) exercises
    exercises = op.create_table(
        'exercises',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=True, index=True),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('short_name', sa.String(length=40), nullable=True),
    )

    # 2) workouts
    op.create_table(
        'workouts',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False, index=True),
        sa.Column('date', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('mood', sa.String(length=40), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
    )

    # 3) sets
    op.create_table(
        'sets',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False, index=True),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('exercises.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('workout_id', sa.Integer(), sa.ForeignKey('workouts.id', ondelete='SET NULL'), nullable=True, index=True),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('reps', sa.Integer(), nullable=False),
        sa.Column('rpe', sa.Float(), nullable=True),
        sa.Column('failed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('performed_at', sa.DateTime(timezone=True), nullable=True, index=True),
    )

    # 4) personal_records, one row per (user, exercise, metric)
    op.create_table(
        'personal_records',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('user_id', sa.String(length=64), nullable=False, index=True),
        sa.Column('exercise_id', sa.Integer(), sa.ForeignKey('exercises.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('metric', sa.String(length=16), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('performed_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('set_id', sa.Integer(), sa.ForeignKey('sets.id', ondelete='SET NULL'), nullable=True),
        sa.UniqueConstraint('user_id', 'exercise_id', 'metric', name='uq_pr_user_exercise_metric'),
    )

    op.bulk_insert(exercises, [{"user_id": None, "name": n, "short_name": s} for n, s in CATALOGUE])


def downgrade() -> None:
    # drop child tables in reverse order
    op.drop_table('personal_records')
    op.drop_table('sets')
    op.drop_table('workouts')
    op.drop_table('exercises')
