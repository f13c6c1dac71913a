"""Workout session lifecycle and completion endpoints."""

from fastapi import APIRouter, Depends, status

from app.api.deps import get_orchestrator
from app.schemas.workout import (
    ActiveSessionCompleteRequest,
    ExerciseDataUpdate,
    SessionCompleteRequest,
    SessionCompletionResult,
    SessionStartRequest,
    WorkoutSession,
)
from app.services.session_completion import SessionCompletionOrchestrator

router = APIRouter()


@router.post("/start", response_model=WorkoutSession, status_code=status.HTTP_201_CREATED)
async def start_session(
    payload: SessionStartRequest,
    orchestrator: SessionCompletionOrchestrator = Depends(get_orchestrator),
):
    """Start a workout. Replaces any session already in progress for the user."""
    return orchestrator.start_session(payload)


@router.put("/{user_id}/exercises", response_model=WorkoutSession)
async def record_exercise(
    user_id: str,
    payload: ExerciseDataUpdate,
    orchestrator: SessionCompletionOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.record_exercise(user_id, payload)


@router.get("/{user_id}/active", response_model=WorkoutSession)
async def get_active_session(
    user_id: str,
    orchestrator: SessionCompletionOrchestrator = Depends(get_orchestrator),
):
    return orchestrator.get_active_session(user_id)


@router.delete("/{user_id}/active")
async def cancel_session(
    user_id: str,
    orchestrator: SessionCompletionOrchestrator = Depends(get_orchestrator),
):
    """Discard the workout in progress without recording anything."""
    return {"cancelled": orchestrator.cancel_session(user_id)}


@router.post("/{user_id}/complete", response_model=SessionCompletionResult)
async def complete_active_session(
    user_id: str,
    payload: ActiveSessionCompleteRequest,
    orchestrator: SessionCompletionOrchestrator = Depends(get_orchestrator),
):
    """Complete the user's active session and run every aggregation step."""
    return await orchestrator.complete_active_session(user_id, payload.course)


@router.post("/complete", response_model=SessionCompletionResult)
async def complete_session(
    payload: SessionCompleteRequest,
    orchestrator: SessionCompletionOrchestrator = Depends(get_orchestrator),
):
    """
    Complete a fully supplied session (e.g. recorded offline). A `completed_at`
    already on the session is kept; otherwise the server clock is used.
    """
    return await orchestrator.complete_session(payload.session, payload.course)
