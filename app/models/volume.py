"""Weekly per-muscle effective-set ledger."""

from __future__ import annotations

from sqlalchemy import Float, String
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class WeeklyMuscleVolume(Base):
    """Accumulated effective sets for one muscle in one Monday-anchored week.

    Only ever written through an atomic upsert-increment, so concurrent
    completions from several devices add up regardless of ordering.
    """

    __tablename__ = "weekly_muscle_volumes"

    user_id: Mapped[str] = mapped_column(String(128), primary_key=True)
    week_key: Mapped[str] = mapped_column(String(10), primary_key=True)  # "2025-W07"
    muscle: Mapped[str] = mapped_column(String(100), primary_key=True)
    volume: Mapped[float] = mapped_column(Float, default=0.0, nullable=False)
