"""Exercise and session history records written on session completion."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ExerciseHistoryEntry(Base):
    """Populated sets of one exercise in one completed session."""

    __tablename__ = "exercise_history_entries"
    __table_args__ = (
        Index("ix_exercise_history_user_exercise_date", "user_id", "exercise_key", "date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    exercise_key: Mapped[str] = mapped_column(String(512), nullable=False)
    session_id: Mapped[str] = mapped_column(String(128), nullable=False)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    sets: Mapped[list] = mapped_column(JSON, default=list, nullable=False)


class SessionHistory(Base):
    """Summary of a completed session, keyed by session id (re-completion overwrites)."""

    __tablename__ = "session_history"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    session_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    course_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    course_name: Mapped[str] = mapped_column(String(255), nullable=False)
    session_name: Mapped[str] = mapped_column(String(255), nullable=False)
    completed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    # exercise key -> {"exercise_name": ..., "sets": [...]}
    exercises: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
