"""Persistent store for derived training state.

`PerformanceStore` is the contract the services depend on. Every numeric
aggregate that can be touched by two devices at once (weekly muscle volume,
total sessions completed, the completed-session set) is exposed as a
commutative operation; nothing here offers a read-modify-write of those.

`SqlAlchemyPerformanceStore` runs each call in its own short transaction, so a
rejected write never poisons the steps that follow it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Numeric, cast, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import PersistenceError
from app.core.numbers import round_half_up
from app.models.history import ExerciseHistoryEntry, SessionHistory
from app.models.one_rep_max import OneRepMaxEstimate, OneRepMaxRecord
from app.models.progress import CompletedSession, CourseProgress, WeeklyStreak
from app.models.volume import WeeklyMuscleVolume
from app.schemas.one_rep_max import AchievedWith, OneRepMaxEstimateRead, OneRepMaxHistoryEntry
from app.schemas.progress import CourseProgressRead, WeeklyStreakRead

_UPSERT_INSERTS = {"postgresql": pg_insert, "sqlite": sqlite_insert}


def _utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything we write is UTC
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class PerformanceStore(ABC):
    """Storage contract for the session performance engine."""

    # Weekly muscle volume ledger
    @abstractmethod
    async def increment_weekly_muscle_volume(
        self, user_id: str, week_key: str, muscle: str, delta: float
    ) -> None:
        """Atomically add `delta` to the stored total (created at 0 when missing)."""

    @abstractmethod
    async def get_weekly_muscle_volume(self, user_id: str, week_key: str) -> dict[str, float]: ...

    # 1RM
    @abstractmethod
    async def get_one_rep_max_estimates(self, user_id: str) -> dict[str, OneRepMaxEstimateRead]: ...

    @abstractmethod
    async def set_one_rep_max_estimate(self, user_id: str, estimate: OneRepMaxEstimateRead) -> None: ...

    @abstractmethod
    async def clear_one_rep_max_estimate(self, user_id: str, exercise_key: str) -> None: ...

    @abstractmethod
    async def append_one_rep_max_record(
        self,
        user_id: str,
        exercise_key: str,
        date: datetime,
        estimate: float,
        achieved_with: AchievedWith | None = None,
    ) -> None: ...

    @abstractmethod
    async def list_one_rep_max_records(
        self, user_id: str, exercise_keys: list[str], limit: int
    ) -> dict[str, list[OneRepMaxHistoryEntry]]:
        """Most recent `limit` entries per exercise, ascending by date."""

    @abstractmethod
    async def get_best_one_rep_max_estimates(
        self, user_id: str, exercise_keys: list[str]
    ) -> dict[str, float]:
        """Highest estimate ever recorded per exercise; keys without history are absent."""

    # Exercise / session history
    @abstractmethod
    async def add_exercise_history(
        self, user_id: str, exercise_key: str, session_id: str, date: datetime, sets: list[dict]
    ) -> None: ...

    @abstractmethod
    async def list_exercise_history(self, user_id: str, exercise_key: str, limit: int) -> list[dict]:
        """Newest first."""

    @abstractmethod
    async def put_session_history(self, user_id: str, record: dict[str, Any]) -> None: ...

    @abstractmethod
    async def get_session_history(self, user_id: str, session_id: str) -> dict[str, Any] | None: ...

    # Course progress
    @abstractmethod
    async def get_course_progress(self, user_id: str, course_id: str) -> CourseProgressRead | None: ...

    @abstractmethod
    async def record_course_completion(
        self,
        user_id: str,
        course_id: str,
        session_id: str,
        completed_at: datetime,
        mark_completed: bool = True,
    ) -> None:
        """Increment the session counter, set the last session, add `session_id` to the completed set."""

    # Weekly streak
    @abstractmethod
    async def get_weekly_streak(self, user_id: str, course_id: str) -> WeeklyStreakRead | None: ...

    @abstractmethod
    async def save_weekly_streak(self, state: WeeklyStreakRead) -> None: ...


class SqlAlchemyPerformanceStore(PerformanceStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory.begin() as session:
                yield session
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    @staticmethod
    def _insert(session: AsyncSession, model):
        dialect = session.get_bind().dialect.name
        try:
            return _UPSERT_INSERTS[dialect](model)
        except KeyError:
            raise PersistenceError(f"Upserts are not supported on {dialect}") from None

    # ------------------------------------------------------------------
    # Weekly muscle volume
    # ------------------------------------------------------------------

    async def increment_weekly_muscle_volume(
        self, user_id: str, week_key: str, muscle: str, delta: float
    ) -> None:
        async with self._transaction() as session:
            stmt = self._insert(session, WeeklyMuscleVolume).values(
                user_id=user_id, week_key=week_key, muscle=muscle, volume=round_half_up(delta)
            )
            # Both operands are already at one decimal; round only clears float noise
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "week_key", "muscle"],
                set_={
                    "volume": func.round(
                        cast(WeeklyMuscleVolume.volume + stmt.excluded.volume, Numeric), 1
                    )
                },
            )
            await session.execute(stmt)

    async def get_weekly_muscle_volume(self, user_id: str, week_key: str) -> dict[str, float]:
        async with self._transaction() as session:
            result = await session.execute(
                select(WeeklyMuscleVolume.muscle, WeeklyMuscleVolume.volume).where(
                    WeeklyMuscleVolume.user_id == user_id,
                    WeeklyMuscleVolume.week_key == week_key,
                )
            )
            return {row.muscle: round_half_up(float(row.volume)) for row in result.all()}

    # ------------------------------------------------------------------
    # 1RM
    # ------------------------------------------------------------------

    @staticmethod
    def _estimate_read(row: OneRepMaxEstimate) -> OneRepMaxEstimateRead:
        achieved = None
        if row.achieved_weight is not None and row.achieved_reps is not None:
            achieved = AchievedWith(weight=row.achieved_weight, reps=row.achieved_reps)
        return OneRepMaxEstimateRead(
            exercise_key=row.exercise_key,
            current=row.current,
            last_updated=_utc(row.last_updated),
            achieved_with=achieved,
        )

    async def get_one_rep_max_estimates(self, user_id: str) -> dict[str, OneRepMaxEstimateRead]:
        async with self._transaction() as session:
            result = await session.execute(
                select(OneRepMaxEstimate).where(OneRepMaxEstimate.user_id == user_id)
            )
            return {row.exercise_key: self._estimate_read(row) for row in result.scalars().all()}

    async def set_one_rep_max_estimate(self, user_id: str, estimate: OneRepMaxEstimateRead) -> None:
        achieved = estimate.achieved_with
        values = {
            "current": estimate.current,
            "last_updated": estimate.last_updated,
            "achieved_weight": achieved.weight if achieved else None,
            "achieved_reps": achieved.reps if achieved else None,
        }
        async with self._transaction() as session:
            stmt = self._insert(session, OneRepMaxEstimate).values(
                user_id=user_id, exercise_key=estimate.exercise_key, **values
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "exercise_key"], set_=values
            )
            await session.execute(stmt)

    async def clear_one_rep_max_estimate(self, user_id: str, exercise_key: str) -> None:
        async with self._transaction() as session:
            await session.execute(
                update(OneRepMaxEstimate)
                .where(
                    OneRepMaxEstimate.user_id == user_id,
                    OneRepMaxEstimate.exercise_key == exercise_key,
                )
                .values(current=None, achieved_weight=None, achieved_reps=None)
            )

    async def append_one_rep_max_record(
        self,
        user_id: str,
        exercise_key: str,
        date: datetime,
        estimate: float,
        achieved_with: AchievedWith | None = None,
    ) -> None:
        async with self._transaction() as session:
            session.add(
                OneRepMaxRecord(
                    user_id=user_id,
                    exercise_key=exercise_key,
                    date=date,
                    estimate=estimate,
                    achieved_weight=achieved_with.weight if achieved_with else None,
                    achieved_reps=achieved_with.reps if achieved_with else None,
                )
            )

    async def list_one_rep_max_records(
        self, user_id: str, exercise_keys: list[str], limit: int
    ) -> dict[str, list[OneRepMaxHistoryEntry]]:
        histories: dict[str, list[OneRepMaxHistoryEntry]] = {key: [] for key in exercise_keys}
        if not exercise_keys:
            return histories
        async with self._transaction() as session:
            result = await session.execute(
                select(OneRepMaxRecord)
                .where(
                    OneRepMaxRecord.user_id == user_id,
                    OneRepMaxRecord.exercise_key.in_(exercise_keys),
                )
                .order_by(OneRepMaxRecord.date, OneRepMaxRecord.id)
            )
            for row in result.scalars().all():
                achieved = None
                if row.achieved_weight is not None and row.achieved_reps is not None:
                    achieved = AchievedWith(weight=row.achieved_weight, reps=row.achieved_reps)
                histories[row.exercise_key].append(
                    OneRepMaxHistoryEntry(date=_utc(row.date), estimate=row.estimate, achieved_with=achieved)
                )
        return {key: entries[-limit:] for key, entries in histories.items()}

    async def get_best_one_rep_max_estimates(
        self, user_id: str, exercise_keys: list[str]
    ) -> dict[str, float]:
        if not exercise_keys:
            return {}
        async with self._transaction() as session:
            result = await session.execute(
                select(OneRepMaxRecord.exercise_key, func.max(OneRepMaxRecord.estimate))
                .where(
                    OneRepMaxRecord.user_id == user_id,
                    OneRepMaxRecord.exercise_key.in_(exercise_keys),
                )
                .group_by(OneRepMaxRecord.exercise_key)
            )
            return {key: best for key, best in result.all()}

    # ------------------------------------------------------------------
    # Exercise / session history
    # ------------------------------------------------------------------

    async def add_exercise_history(
        self, user_id: str, exercise_key: str, session_id: str, date: datetime, sets: list[dict]
    ) -> None:
        async with self._transaction() as session:
            session.add(
                ExerciseHistoryEntry(
                    user_id=user_id,
                    exercise_key=exercise_key,
                    session_id=session_id,
                    date=date,
                    sets=sets,
                )
            )

    async def list_exercise_history(self, user_id: str, exercise_key: str, limit: int) -> list[dict]:
        async with self._transaction() as session:
            result = await session.execute(
                select(ExerciseHistoryEntry)
                .where(
                    ExerciseHistoryEntry.user_id == user_id,
                    ExerciseHistoryEntry.exercise_key == exercise_key,
                )
                .order_by(ExerciseHistoryEntry.date.desc(), ExerciseHistoryEntry.id.desc())
                .limit(limit)
            )
            return [
                {"date": _utc(row.date), "session_id": row.session_id, "sets": row.sets}
                for row in result.scalars().all()
            ]

    async def put_session_history(self, user_id: str, record: dict[str, Any]) -> None:
        values = {
            "course_id": record["course_id"],
            "course_name": record["course_name"],
            "session_name": record["session_name"],
            "completed_at": record["completed_at"],
            "duration_minutes": record["duration_minutes"],
            "exercises": record["exercises"],
        }
        async with self._transaction() as session:
            stmt = self._insert(session, SessionHistory).values(
                user_id=user_id, session_id=record["session_id"], **values
            )
            stmt = stmt.on_conflict_do_update(index_elements=["user_id", "session_id"], set_=values)
            await session.execute(stmt)

    async def get_session_history(self, user_id: str, session_id: str) -> dict[str, Any] | None:
        async with self._transaction() as session:
            row = await session.get(SessionHistory, (user_id, session_id))
            if row is None:
                return None
            return {
                "session_id": row.session_id,
                "course_id": row.course_id,
                "course_name": row.course_name,
                "session_name": row.session_name,
                "completed_at": _utc(row.completed_at),
                "duration_minutes": row.duration_minutes,
                "exercises": row.exercises,
            }

    # ------------------------------------------------------------------
    # Course progress
    # ------------------------------------------------------------------

    async def get_course_progress(self, user_id: str, course_id: str) -> CourseProgressRead | None:
        async with self._transaction() as session:
            row = await session.get(CourseProgress, (user_id, course_id))
            if row is None:
                return None
            result = await session.execute(
                select(CompletedSession.session_id)
                .where(
                    CompletedSession.user_id == user_id,
                    CompletedSession.course_id == course_id,
                )
                .order_by(CompletedSession.first_completed_at, CompletedSession.session_id)
            )
            return CourseProgressRead(
                user_id=user_id,
                course_id=course_id,
                total_sessions_completed=row.total_sessions_completed,
                last_session_completed=row.last_session_completed,
                all_sessions_completed=list(result.scalars().all()),
                last_activity=_utc(row.last_activity),
            )

    async def record_course_completion(
        self,
        user_id: str,
        course_id: str,
        session_id: str,
        completed_at: datetime,
        mark_completed: bool = True,
    ) -> None:
        async with self._transaction() as session:
            stmt = self._insert(session, CourseProgress).values(
                user_id=user_id,
                course_id=course_id,
                total_sessions_completed=1,
                last_session_completed=session_id,
                last_activity=completed_at,
            )
            stmt = stmt.on_conflict_do_update(
                index_elements=["user_id", "course_id"],
                set_={
                    "total_sessions_completed": CourseProgress.total_sessions_completed + 1,
                    "last_session_completed": stmt.excluded.last_session_completed,
                    "last_activity": stmt.excluded.last_activity,
                },
            )
            await session.execute(stmt)

            if mark_completed:
                member = self._insert(session, CompletedSession).values(
                    user_id=user_id,
                    course_id=course_id,
                    session_id=session_id,
                    first_completed_at=completed_at,
                )
                await session.execute(
                    member.on_conflict_do_nothing(index_elements=["user_id", "course_id", "session_id"])
                )

    # ------------------------------------------------------------------
    # Weekly streak
    # ------------------------------------------------------------------

    async def get_weekly_streak(self, user_id: str, course_id: str) -> WeeklyStreakRead | None:
        async with self._transaction() as session:
            row = await session.get(WeeklyStreak, (user_id, course_id))
            if row is None:
                return None
            return WeeklyStreakRead(
                user_id=row.user_id,
                course_id=row.course_id,
                current_streak=row.current_streak,
                sessions_completed_this_week=row.sessions_completed_this_week,
                week_start=row.week_start,
                last_workout_date=_utc(row.last_workout_date),
            )

    async def save_weekly_streak(self, state: WeeklyStreakRead) -> None:
        values = {
            "current_streak": state.current_streak,
            "sessions_completed_this_week": state.sessions_completed_this_week,
            "week_start": state.week_start,
            "last_workout_date": state.last_workout_date,
        }
        async with self._transaction() as session:
            stmt = self._insert(session, WeeklyStreak).values(
                user_id=state.user_id, course_id=state.course_id, **values
            )
            stmt = stmt.on_conflict_do_update(index_elements=["user_id", "course_id"], set_=values)
            await session.execute(stmt)
