"""Course progress counters, completed-session set and weekly streak state."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class CourseProgress(Base):
    __tablename__ = "course_progress"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    total_sessions_completed: Mapped[int] = mapped_column(Integer, default=0, nullable=False)  # atomic increments only
    last_session_completed: Mapped[str | None] = mapped_column(String(128), nullable=True)
    last_activity: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CompletedSession(Base):
    """Membership row of allSessionsCompleted; the composite key keeps it a set."""

    __tablename__ = "course_completed_sessions"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    first_completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )


class WeeklyStreak(Base):
    __tablename__ = "weekly_streaks"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    current_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    sessions_completed_this_week: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    week_start: Mapped[str] = mapped_column(String(10), nullable=False)
    last_workout_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
