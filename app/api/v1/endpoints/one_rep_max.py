"""1RM estimates, weight suggestions, history and PR endpoints."""

from fastapi import APIRouter, Depends, status

from app.api.deps import get_one_rep_max_estimator
from app.core.numbers import round_half_up
from app.schemas.exercise import ExerciseKey
from app.schemas.one_rep_max import (
    DetectPRsRequest,
    DetectPRsResponse,
    EstimateRequest,
    EstimateResponse,
    OneRepMaxEstimateRead,
    OneRepMaxHistoryEntry,
    WeightSuggestionRequest,
    WeightSuggestionResponse,
)
from app.services.one_rep_max import (
    OneRepMaxEstimator,
    detect_prs,
    estimate_one_rep_max,
    latest_estimate_per_exercise,
    suggest_weight,
)

router = APIRouter()


@router.post("/estimate", response_model=EstimateResponse)
async def estimate(payload: EstimateRequest):
    """Estimated 1RM for one set. `display` is rounded to one decimal."""
    value = estimate_one_rep_max(payload.weight, payload.reps, payload.intensity)
    return EstimateResponse(estimate=value, display=round_half_up(value))


@router.post("/suggest-weight", response_model=WeightSuggestionResponse)
async def suggest(payload: WeightSuggestionRequest):
    return WeightSuggestionResponse(
        weight=suggest_weight(payload.estimate_1rm, payload.target_reps, payload.target_intensity)
    )


@router.post("/prs", response_model=DetectPRsResponse)
async def prs(payload: DetectPRsRequest):
    found = detect_prs(payload.exercise_key, payload.history)
    return DetectPRsResponse(prs=found, latest=latest_estimate_per_exercise(found))


@router.get("/{user_id}/estimates", response_model=dict[str, OneRepMaxEstimateRead])
async def list_estimates(
    user_id: str,
    estimator: OneRepMaxEstimator = Depends(get_one_rep_max_estimator),
):
    return await estimator.get_estimates(user_id)


@router.get("/{user_id}/history/{exercise_key}", response_model=list[OneRepMaxHistoryEntry])
async def get_history(
    user_id: str,
    exercise_key: str,
    estimator: OneRepMaxEstimator = Depends(get_one_rep_max_estimator),
):
    """Estimate history for one exercise, oldest first.

    The path is decoded once before parsing, so a key whose parts contain an
    escaped "_" (`%5F`) must be URL-encoded again by the client.
    """
    key = ExerciseKey.parse(exercise_key).serialize()
    return await estimator.get_history(user_id, key)


@router.delete("/{user_id}/estimates/{exercise_key}", status_code=status.HTTP_204_NO_CONTENT)
async def reset_estimate(
    user_id: str,
    exercise_key: str,
    estimator: OneRepMaxEstimator = Depends(get_one_rep_max_estimator),
):
    """Clear the current estimate. History is kept.

    `exercise_key` follows the same encoding rule as the history route.
    """
    key = ExerciseKey.parse(exercise_key).serialize()
    await estimator.reset_estimate(user_id, key)
