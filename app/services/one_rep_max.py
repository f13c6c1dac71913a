"""1RM estimation, weight suggestions, estimate history and PR detection.

Formula: 1RM = weight * (1 + 0.0333 * reps) / (1 - 0.025 * (10 - intensity))

Intensity below 10 assumes reps were left in reserve, so the estimate goes up.
Estimates are stored unrounded; only presentation rounds to one decimal.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable
from datetime import datetime, timezone

from app.core.constants import (
    DEFAULT_TARGET_REPS,
    INTENSITY_MAX,
    INTENSITY_MIN,
    ONE_RM_HISTORY_LIMIT,
    ONE_RM_REPS_COEFFICIENT,
    ONE_RM_RIR_DISCOUNT,
    WEIGHT_SUGGESTION_STEP_KG,
)
from app.core.exceptions import EstimateResetError, PersistenceError
from app.repositories.performance_store import PerformanceStore
from app.schemas.exercise import ExercisePerformance
from app.schemas.one_rep_max import (
    AchievedWith,
    OneRepMaxEstimateRead,
    OneRepMaxHistoryEntry,
    PRRecord,
)
from app.services.set_classifier import parse_intensity, parse_number

logger = logging.getLogger(__name__)


def clamp_intensity(intensity: float) -> int:
    return int(min(max(math.floor(intensity), INTENSITY_MIN), INTENSITY_MAX))


def _rir_factor(intensity: float) -> float:
    return 1 - ONE_RM_RIR_DISCOUNT * (INTENSITY_MAX - clamp_intensity(intensity))


def estimate_one_rep_max(weight: float, reps: float, intensity: float) -> float:
    return weight * (1 + ONE_RM_REPS_COEFFICIENT * reps) / _rir_factor(intensity)


def parse_target_reps(raw: str | float | int | None) -> float:
    """Objective reps: "10" -> 10, "8-12" -> 10 (midpoint), "AMRAP" -> fallback 10."""
    if isinstance(raw, (int, float)) and not isinstance(raw, bool):
        return float(raw) if raw > 0 else DEFAULT_TARGET_REPS
    if not raw or not isinstance(raw, str):
        return DEFAULT_TARGET_REPS
    cleaned = "".join(raw.split())
    if "-" in cleaned:
        low, _, high = cleaned.partition("-")
        low_n, high_n = parse_number(low), parse_number(high)
        if low_n is None or high_n is None or low_n <= 0 or high_n <= 0:
            return DEFAULT_TARGET_REPS
        return (low_n + high_n) / 2
    value = parse_number(cleaned)
    if value is None or value <= 0:
        return DEFAULT_TARGET_REPS
    return value


def suggest_weight(estimate_1rm: float, target_reps: str | float | int | None, target_intensity: float) -> float:
    """Working weight for a target reps/intensity, rounded up to the next 5 kg."""
    suggestion = estimate_1rm * _rir_factor(target_intensity) / (
        1 + ONE_RM_REPS_COEFFICIENT * parse_target_reps(target_reps)
    )
    return float(math.ceil(suggestion / WEIGHT_SUGGESTION_STEP_KG) * WEIGHT_SUGGESTION_STEP_KG)


def detect_prs(exercise_key: str, history: Iterable[OneRepMaxHistoryEntry]) -> list[PRRecord]:
    """
    Walk the history chronologically. The first entry sets the baseline and is
    never a PR; any later entry strictly above the baseline is a PR and becomes
    the new baseline.
    """
    prs: list[PRRecord] = []
    baseline: float | None = None
    for entry in sorted(history, key=lambda e: e.date):
        if baseline is None:
            baseline = entry.estimate
            continue
        if entry.estimate > baseline:
            prs.append(
                PRRecord(
                    exercise_key=exercise_key,
                    date=entry.date,
                    estimate=entry.estimate,
                    previous_best=baseline,
                    achieved_with=entry.achieved_with,
                )
            )
            baseline = entry.estimate
    return prs


def latest_estimate_per_exercise(prs: Iterable[PRRecord]) -> dict[str, PRRecord]:
    latest: dict[str, PRRecord] = {}
    for pr in prs:
        current = latest.get(pr.exercise_key)
        if current is None or pr.date > current.date:
            latest[pr.exercise_key] = pr
    return latest


class OneRepMaxEstimator:
    """Estimates plus the persisted current value and append-only history."""

    def __init__(
        self,
        store: PerformanceStore,
        clock: Callable[[], datetime] | None = None,
        history_limit: int = ONE_RM_HISTORY_LIMIT,
    ):
        self.store = store
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.history_limit = history_limit

    estimate = staticmethod(estimate_one_rep_max)
    detect_prs = staticmethod(detect_prs)
    latest_estimate_per_exercise = staticmethod(latest_estimate_per_exercise)

    async def append_history(
        self,
        user_id: str,
        exercise_key: str,
        date: datetime,
        estimate: float,
        achieved_with: AchievedWith | None = None,
    ) -> None:
        await self.store.append_one_rep_max_record(user_id, exercise_key, date, estimate, achieved_with)

    async def get_history(self, user_id: str, exercise_key: str) -> list[OneRepMaxHistoryEntry]:
        histories = await self.store.list_one_rep_max_records(user_id, [exercise_key], self.history_limit)
        return sorted(histories.get(exercise_key, []), key=lambda e: e.date)

    async def get_estimates(self, user_id: str) -> dict[str, OneRepMaxEstimateRead]:
        return await self.store.get_one_rep_max_estimates(user_id)

    async def reset_estimate(self, user_id: str, exercise_key: str) -> None:
        """Clear the current estimate. History stays so later estimates keep their baseline."""
        try:
            await self.store.clear_one_rep_max_estimate(user_id, exercise_key)
        except PersistenceError as exc:
            logger.error("Error resetting 1RM estimate for %s", exercise_key, exc_info=True)
            raise EstimateResetError(f"Could not reset estimate for {exercise_key}") from exc
        logger.info("Reset 1RM estimate for %s", exercise_key, extra={"user_id": user_id})

    @staticmethod
    def best_set_estimate(exercise: ExercisePerformance) -> tuple[float, AchievedWith] | None:
        """Highest estimate among sets with weight, reps and a readable intensity."""
        best: tuple[float, AchievedWith] | None = None
        for index, set_ in enumerate(exercise.sets):
            weight = parse_number(set_.weight)
            reps = parse_number(set_.reps)
            if weight is None or reps is None or weight <= 0 or reps <= 0:
                continue
            intensity = parse_intensity(set_.intensity)
            if not intensity.ok:
                continue
            value = estimate_one_rep_max(weight, int(reps), intensity.value)
            if best is None or value > best[0]:
                best = (value, AchievedWith(weight=weight, reps=int(reps), set_number=index + 1))
        return best

    async def update_estimates_after_session(
        self, user_id: str, exercises: list[ExercisePerformance], completed_at: datetime | None = None
    ) -> list[PRRecord]:
        """
        Estimate every resolved exercise of a finished session, append the best
        set to its history and make it the current estimate. Returns the PR
        events: sessions whose estimate beats every earlier history entry.
        """
        date = completed_at or self.clock()
        candidates: dict[str, tuple[float, AchievedWith]] = {}
        for exercise in exercises:
            key = exercise.exercise_key()
            if key is None:
                logger.debug("Exercise %s has no resolved identity - skipping 1RM", exercise.exercise_id)
                continue
            best = self.best_set_estimate(exercise)
            if best is None:
                continue
            serialized = key.serialize()
            if serialized not in candidates or best[0] > candidates[serialized][0]:
                candidates[serialized] = best

        if not candidates:
            return []

        best_so_far = await self.store.get_best_one_rep_max_estimates(user_id, list(candidates))

        personal_records: list[PRRecord] = []
        for exercise_key, (value, achieved_with) in candidates.items():
            previous_best = best_so_far.get(exercise_key)

            await self.append_history(user_id, exercise_key, date, value, achieved_with)
            await self.store.set_one_rep_max_estimate(
                user_id,
                OneRepMaxEstimateRead(
                    exercise_key=exercise_key,
                    current=value,
                    last_updated=date,
                    achieved_with=achieved_with,
                ),
            )

            if previous_best is not None and value > previous_best:
                personal_records.append(
                    PRRecord(
                        exercise_key=exercise_key,
                        date=date,
                        estimate=value,
                        previous_best=previous_best,
                        achieved_with=achieved_with,
                    )
                )

        logger.info(
            "Updated %d 1RM estimates, %d personal records",
            len(candidates),
            len(personal_records),
            extra={"user_id": user_id},
        )
        return personal_records
