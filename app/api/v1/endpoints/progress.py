"""Course progress and training history endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_course_progress_service, get_history_recorder
from app.schemas.exercise import ExerciseKey
from app.schemas.progress import CourseProgressRead
from app.services.course_progress import CourseProgressService
from app.services.exercise_history import ExerciseHistoryRecorder

router = APIRouter()


@router.get("/{user_id}/{course_id}", response_model=CourseProgressRead)
async def get_course_progress(
    user_id: str,
    course_id: str,
    refresh: bool = False,
    service: CourseProgressService = Depends(get_course_progress_service),
):
    """Progress snapshot, served from the cache unless stale or `refresh=true`."""
    progress = await service.get_progress(user_id, course_id, force_refresh=refresh)
    if progress is None:
        raise HTTPException(status_code=404, detail="No progress recorded for this course")
    return progress


@router.get("/{user_id}/history/exercises/{exercise_key}")
async def get_exercise_history(
    user_id: str,
    exercise_key: str,
    recorder: ExerciseHistoryRecorder = Depends(get_history_recorder),
):
    """Most recent populated sets logged for an exercise, newest first.

    Send the stored key URL-encoded (`quote(key, safe="")`); `%5F` escapes
    inside it would otherwise be decoded into ambiguous separators.
    """
    key = ExerciseKey.parse(exercise_key).serialize()
    return {"exercise_key": key, "entries": await recorder.get_exercise_history(user_id, key)}


@router.get("/{user_id}/history/sessions/{session_id}")
async def get_session_history(
    user_id: str,
    session_id: str,
    recorder: ExerciseHistoryRecorder = Depends(get_history_recorder),
):
    record = await recorder.get_session_history(user_id, session_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Session not found in history")
    return record
