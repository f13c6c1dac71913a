"""Weekly adherence streak endpoint."""

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_streak_tracker
from app.schemas.progress import WeeklyStreakRead
from app.services.streak import StreakTracker

router = APIRouter()


@router.get("/{user_id}/{course_id}", response_model=WeeklyStreakRead)
async def get_streak(
    user_id: str,
    course_id: str,
    tracker: StreakTracker = Depends(get_streak_tracker),
):
    """
    Current weekly streak for a course: consecutive weeks in which the user met
    the course's minimum sessions, plus the sessions counted in the open week.
    """
    streak = await tracker.get_streak(user_id, course_id)
    if streak is None:
        raise HTTPException(status_code=404, detail="No streak recorded for this course")
    return streak
