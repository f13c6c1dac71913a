"""1RM estimate, history and PR schemas."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AchievedWith(BaseModel):
    """The set that produced an estimate (for "80kg x 5" style display)."""

    weight: float
    reps: int
    set_number: int | None = None


class OneRepMaxEstimateRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    exercise_key: str
    current: float | None = None
    last_updated: datetime | None = None
    achieved_with: AchievedWith | None = None


class OneRepMaxHistoryEntry(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: datetime
    estimate: float
    achieved_with: AchievedWith | None = None

    @field_validator("date")
    @classmethod
    def date_as_utc(cls, value: datetime) -> datetime:
        # Naive dates are UTC so mixed histories still sort
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class PRRecord(BaseModel):
    """A history entry that strictly beat every earlier estimate for the exercise."""

    exercise_key: str
    date: datetime
    estimate: float
    previous_best: float
    achieved_with: AchievedWith | None = None


class EstimateRequest(BaseModel):
    weight: float = Field(gt=0)
    reps: float = Field(gt=0)
    intensity: int


class EstimateResponse(BaseModel):
    estimate: float
    display: float


class WeightSuggestionRequest(BaseModel):
    estimate_1rm: float = Field(gt=0)
    target_reps: str | float
    target_intensity: int


class WeightSuggestionResponse(BaseModel):
    weight: float


class DetectPRsRequest(BaseModel):
    exercise_key: str
    history: list[OneRepMaxHistoryEntry]


class DetectPRsResponse(BaseModel):
    prs: list[PRRecord]
    latest: dict[str, PRRecord]
