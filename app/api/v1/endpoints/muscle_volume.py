"""Per-muscle effective-set volume endpoints."""

from fastapi import APIRouter, Depends, Path

from app.api.deps import get_volume_distributor
from app.schemas.progress import (
    MuscleVolumeCalculateRequest,
    MuscleVolumeCalculateResponse,
    WeeklyVolumeRead,
)
from app.services.muscle_volume import MuscleVolumeDistributor

router = APIRouter()

WEEK_KEY_PATTERN = r"^\d{4}-W\d{2}$"


@router.post("/calculate", response_model=MuscleVolumeCalculateResponse)
async def calculate_muscle_volume(payload: MuscleVolumeCalculateRequest):
    """Effective sets per muscle for a list of exercises. Nothing is stored."""
    volumes = MuscleVolumeDistributor.compute_session_muscle_volumes(payload.exercises)
    return MuscleVolumeCalculateResponse(volumes=volumes)


@router.get("/{user_id}/weeks/{week_key}", response_model=WeeklyVolumeRead)
async def get_weekly_volume(
    user_id: str,
    week_key: str = Path(pattern=WEEK_KEY_PATTERN, description="Monday week key, e.g. 2024-W03"),
    distributor: MuscleVolumeDistributor = Depends(get_volume_distributor),
):
    volumes = await distributor.get_weekly_ledger(user_id, week_key)
    return WeeklyVolumeRead(user_id=user_id, week_key=week_key, volumes=volumes)
