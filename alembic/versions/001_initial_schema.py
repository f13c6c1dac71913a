"""Initial schema: volume ledger, 1RM, history, course progress, streaks.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "weekly_muscle_volumes",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("week_key", sa.String(length=10), nullable=False),
        sa.Column("muscle", sa.String(length=100), nullable=False),
        sa.Column("volume", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "week_key", "muscle", name=op.f("pk_weekly_muscle_volumes")),
    )

    op.create_table(
        "one_rep_max_estimates",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("exercise_key", sa.String(length=512), nullable=False),
        sa.Column("current", sa.Float(), nullable=True),
        sa.Column("last_updated", sa.DateTime(timezone=True), nullable=True),
        sa.Column("achieved_weight", sa.Float(), nullable=True),
        sa.Column("achieved_reps", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("user_id", "exercise_key", name=op.f("pk_one_rep_max_estimates")),
    )

    op.create_table(
        "one_rep_max_records",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("exercise_key", sa.String(length=512), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("estimate", sa.Float(), nullable=False),
        sa.Column("achieved_weight", sa.Float(), nullable=True),
        sa.Column("achieved_reps", sa.Integer(), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_one_rep_max_records")),
    )
    op.create_index(
        "ix_one_rep_max_records_user_exercise_date",
        "one_rep_max_records",
        ["user_id", "exercise_key", "date"],
        unique=False,
    )

    op.create_table(
        "exercise_history_entries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("exercise_key", sa.String(length=512), nullable=False),
        sa.Column("session_id", sa.String(length=128), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("sets", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_exercise_history_entries")),
    )
    op.create_index(
        "ix_exercise_history_user_exercise_date",
        "exercise_history_entries",
        ["user_id", "exercise_key", "date"],
        unique=False,
    )

    op.create_table(
        "session_history",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("session_id", sa.String(length=128), nullable=False),
        sa.Column("course_id", sa.String(length=128), nullable=False),
        sa.Column("course_name", sa.String(length=255), nullable=False),
        sa.Column("session_name", sa.String(length=255), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("exercises", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "session_id", name=op.f("pk_session_history")),
    )
    op.create_index(op.f("ix_session_history_course_id"), "session_history", ["course_id"], unique=False)

    op.create_table(
        "course_progress",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("course_id", sa.String(length=128), nullable=False),
        sa.Column("total_sessions_completed", sa.Integer(), nullable=False),
        sa.Column("last_session_completed", sa.String(length=128), nullable=True),
        sa.Column("last_activity", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("user_id", "course_id", name=op.f("pk_course_progress")),
    )

    op.create_table(
        "course_completed_sessions",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("course_id", sa.String(length=128), nullable=False),
        sa.Column("session_id", sa.String(length=128), nullable=False),
        sa.Column("first_completed_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("user_id", "course_id", "session_id", name=op.f("pk_course_completed_sessions")),
    )

    op.create_table(
        "weekly_streaks",
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("course_id", sa.String(length=128), nullable=False),
        sa.Column("current_streak", sa.Integer(), nullable=False),
        sa.Column("sessions_completed_this_week", sa.Integer(), nullable=False),
        sa.Column("week_start", sa.String(length=10), nullable=False),
        sa.Column("last_workout_date", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("user_id", "course_id", name=op.f("pk_weekly_streaks")),
    )


def downgrade() -> None:
    op.drop_table("weekly_streaks")
    op.drop_table("course_completed_sessions")
    op.drop_table("course_progress")
    op.drop_index(op.f("ix_session_history_course_id"), table_name="session_history")
    op.drop_table("session_history")
    op.drop_index("ix_exercise_history_user_exercise_date", table_name="exercise_history_entries")
    op.drop_table("exercise_history_entries")
    op.drop_index("ix_one_rep_max_records_user_exercise_date", table_name="one_rep_max_records")
    op.drop_table("one_rep_max_records")
    op.drop_table("one_rep_max_estimates")
    op.drop_table("weekly_muscle_volumes")
