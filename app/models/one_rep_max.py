"""1RM estimate (current value) and its append-only history."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class OneRepMaxEstimate(Base):
    """Latest estimate per exercise. `current` is a convenience value and may be reset."""

    __tablename__ = "one_rep_max_estimates"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    exercise_key: Mapped[str] = mapped_column(String(512), primary_key=True)
    current: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_updated: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    achieved_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    achieved_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)


class OneRepMaxRecord(Base):
    """One history entry. Never updated or rounded once written."""

    __tablename__ = "one_rep_max_records"
    __table_args__ = (
        Index("ix_one_rep_max_records_user_exercise_date", "user_id", "exercise_key", "date"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    exercise_key: Mapped[str] = mapped_column(String(512), nullable=False)
    date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False
    )
    estimate: Mapped[float] = mapped_column(Float, nullable=False)
    achieved_weight: Mapped[float | None] = mapped_column(Float, nullable=True)
    achieved_reps: Mapped[int | None] = mapped_column(Integer, nullable=True)
