"""Weekly adherence streak per (user, course).

The first completed session starts the streak at 1. Later completions in the
same week only bump the weekly session count. The first completion of a new
week closes the previous one: if it reached the course minimum the streak
grows by one, otherwise it drops to 0. The new week then starts with this
session counted.

Failures are raised as StreakUpdateError instead of being swallowed like the
analytics steps, since the streak is user-visible.
"""

from __future__ import annotations

import logging
from datetime import datetime

from app.core.constants import DEFAULT_MINIMUM_SESSIONS_PER_WEEK
from app.core.enums import StreakTransition
from app.core.exceptions import StreakUpdateError
from app.core.week import WeekKeyFunc, get_monday_week
from app.repositories.performance_store import PerformanceStore
from app.schemas.progress import WeeklyStreakRead

logger = logging.getLogger(__name__)


def advance_streak(
    state: WeeklyStreakRead | None,
    *,
    user_id: str,
    course_id: str,
    week_key: str,
    completed_at: datetime,
    minimum_sessions: int = DEFAULT_MINIMUM_SESSIONS_PER_WEEK,
) -> WeeklyStreakRead:
    """Pure transition for one completed session. Returns a new state."""
    if state is None:
        return WeeklyStreakRead(
            user_id=user_id,
            course_id=course_id,
            current_streak=1,
            sessions_completed_this_week=1,
            week_start=week_key,
            last_workout_date=completed_at,
            transition=StreakTransition.STARTED,
        )

    if week_key == state.week_start:
        return state.model_copy(
            update={
                "sessions_completed_this_week": state.sessions_completed_this_week + 1,
                "last_workout_date": completed_at,
                "transition": StreakTransition.SAME_WEEK,
            }
        )

    if week_key < state.week_start:
        # Completions are processed in order; an older week cannot reopen a closed one
        last = state.last_workout_date
        return state.model_copy(
            update={
                "last_workout_date": completed_at if last is None or completed_at > last else last,
                "transition": StreakTransition.STALE,
            }
        )

    if state.sessions_completed_this_week >= minimum_sessions:
        streak, transition = state.current_streak + 1, StreakTransition.EXTENDED
    else:
        streak, transition = 0, StreakTransition.RESET
    return state.model_copy(
        update={
            "current_streak": streak,
            "sessions_completed_this_week": 1,
            "week_start": week_key,
            "last_workout_date": completed_at,
            "transition": transition,
        }
    )


class StreakTracker:
    def __init__(self, store: PerformanceStore, week_key: WeekKeyFunc = get_monday_week):
        self.store = store
        self.week_key = week_key

    async def get_streak(self, user_id: str, course_id: str) -> WeeklyStreakRead | None:
        return await self.store.get_weekly_streak(user_id, course_id)

    async def record_completion(
        self,
        user_id: str,
        course_id: str,
        completed_at: datetime,
        minimum_sessions: int | None = None,
    ) -> WeeklyStreakRead:
        minimum = minimum_sessions or DEFAULT_MINIMUM_SESSIONS_PER_WEEK
        try:
            previous = await self.store.get_weekly_streak(user_id, course_id)
            state = advance_streak(
                previous,
                user_id=user_id,
                course_id=course_id,
                week_key=self.week_key(completed_at),
                completed_at=completed_at,
                minimum_sessions=minimum,
            )
            await self.store.save_weekly_streak(state)
        except Exception as exc:
            logger.error(
                "Error updating weekly streak",
                exc_info=True,
                extra={"user_id": user_id, "course_id": course_id},
            )
            raise StreakUpdateError(user_id, course_id, exc) from exc

        if state.transition == StreakTransition.STALE:
            logger.warning(
                "Completion from week %s is older than tracked week %s - streak unchanged",
                self.week_key(completed_at),
                state.week_start,
                extra={"user_id": user_id, "course_id": course_id},
            )
        else:
            logger.info(
                "Streak %s: current=%d sessions_this_week=%d week=%s",
                state.transition.value,
                state.current_streak,
                state.sessions_completed_this_week,
                state.week_start,
                extra={"user_id": user_id, "course_id": course_id},
            )
        return state
