"""Per-muscle effective-set volume for a session and the weekly ledger it feeds."""

from __future__ import annotations

import logging
from collections import defaultdict

from app.core.numbers import round_half_up
from app.repositories.performance_store import PerformanceStore
from app.schemas.exercise import ExercisePerformance
from app.services.set_classifier import count_effective_sets, parse_number

logger = logging.getLogger(__name__)


def should_track_muscle_volume(discipline: str | None, tracked_disciplines: list[str]) -> bool:
    """True when the first word of the course discipline is a volume-tracked one."""
    if not discipline or not isinstance(discipline, str):
        return False
    first_word = discipline.strip().lower().replace("-", " ").split(" ")[0]
    return first_word in {d.lower() for d in tracked_disciplines}


def has_activation_data(exercises: list[ExercisePerformance]) -> bool:
    return any(ex.muscle_activation for ex in exercises)


class MuscleVolumeDistributor:
    def __init__(self, store: PerformanceStore):
        self.store = store

    @staticmethod
    def compute_session_muscle_volumes(exercises: list[ExercisePerformance]) -> dict[str, float]:
        """
        Distribute each exercise's effective sets to every muscle it activates,
        scaled by that muscle's activation percentage. Totals are rounded to one
        decimal only once all exercises have been summed.
        """
        muscle_sets: dict[str, float] = defaultdict(float)

        for exercise in exercises:
            if not exercise.muscle_activation:
                logger.debug("No muscle activation for %s - skipping", exercise.exercise_id)
                continue
            if not exercise.sets:
                continue

            effective_sets = count_effective_sets(exercise.sets)
            if effective_sets == 0:
                continue

            for muscle, percentage in exercise.muscle_activation.items():
                numeric = parse_number(percentage)
                if numeric is None:
                    logger.warning(
                        "Invalid activation percentage %r for %s on %s - skipping",
                        percentage,
                        muscle,
                        exercise.exercise_id,
                    )
                    continue
                muscle_sets[muscle] += effective_sets * (numeric / 100)

        return {muscle: round_half_up(total) for muscle, total in muscle_sets.items()}

    async def merge_into_weekly_ledger(self, user_id: str, week_key: str, deltas: dict[str, float]) -> None:
        """One atomic increment per muscle; never rewrites the ledger."""
        for muscle, delta in deltas.items():
            await self.store.increment_weekly_muscle_volume(user_id, week_key, muscle, delta)
        logger.info(
            "Merged %d muscle volume deltas into week %s",
            len(deltas),
            week_key,
            extra={"user_id": user_id, "week_key": week_key},
        )

    async def get_weekly_ledger(self, user_id: str, week_key: str) -> dict[str, float]:
        return await self.store.get_weekly_muscle_volume(user_id, week_key)
