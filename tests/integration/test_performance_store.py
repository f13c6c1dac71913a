"""
Integration tests for SqlAlchemyPerformanceStore on SQLite.

Covered:
- weekly volume increments (commutative, persisted at one decimal)
- 1RM estimate upsert/reset and unrounded append-only history
- exercise and session history
- course progress counter and duplicate-free completed-session set
- weekly streak persistence
"""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.models.volume import WeeklyMuscleVolume
from app.schemas.one_rep_max import AchievedWith, OneRepMaxEstimateRead
from app.schemas.progress import WeeklyStreakRead
from app.services.one_rep_max import estimate_one_rep_max

pytestmark = pytest.mark.integration

T0 = datetime(2025, 3, 3, 10, 0, tzinfo=timezone.utc)


# ---------------------------------------------------------------------------
# Weekly muscle volume
# ---------------------------------------------------------------------------

async def test_increments_accumulate_from_zero(store):
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "chest", 3.0)
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "chest", 1.5)
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "triceps", 1.5)
    assert await store.get_weekly_muscle_volume("u1", "2025-W10") == {"chest": 4.5, "triceps": 1.5}


async def test_persisted_volume_is_rounded_to_one_decimal(store, session_factory):
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "glutes", 2.4)
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "glutes", 0.7)
    async with session_factory() as session:
        stored = (await session.execute(select(WeeklyMuscleVolume.volume))).scalar_one()
    assert stored == 3.1


async def test_half_tenth_deltas_round_up_on_insert_and_on_conflict(store, session_factory):
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "biceps", 0.25)
    assert await store.get_weekly_muscle_volume("u1", "2025-W10") == {"biceps": 0.3}
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "biceps", 0.25)
    async with session_factory() as session:
        stored = (await session.execute(select(WeeklyMuscleVolume.volume))).scalar_one()
    assert stored == 0.6


async def test_merge_order_does_not_matter(store):
    deltas = [("quads", 4.0), ("glutes", 2.4), ("quads", 1.2), ("glutes", 0.7)]
    for muscle, delta in deltas:
        await store.increment_weekly_muscle_volume("u1", "2025-W10", muscle, delta)
    for muscle, delta in reversed(deltas):
        await store.increment_weekly_muscle_volume("u2", "2025-W10", muscle, delta)
    assert await store.get_weekly_muscle_volume("u1", "2025-W10") == await store.get_weekly_muscle_volume(
        "u2", "2025-W10"
    )


async def test_weeks_and_users_are_separate_buckets(store):
    await store.increment_weekly_muscle_volume("u1", "2025-W10", "chest", 3.0)
    assert await store.get_weekly_muscle_volume("u1", "2025-W11") == {}
    assert await store.get_weekly_muscle_volume("u2", "2025-W10") == {}


# ---------------------------------------------------------------------------
# 1RM
# ---------------------------------------------------------------------------

async def test_history_keeps_full_precision(store):
    value = estimate_one_rep_max(80, 8, 8)
    await store.append_one_rep_max_record("u1", "lib1_Bench%20Press", T0, value, AchievedWith(weight=80, reps=8))
    history = await store.list_one_rep_max_records("u1", ["lib1_Bench%20Press"], 200)
    entry = history["lib1_Bench%20Press"][0]
    assert entry.estimate == value
    assert entry.date == T0
    assert entry.achieved_with.weight == 80


async def test_history_is_oldest_first_and_limited_to_most_recent(store):
    for week in (2, 0, 1, 3):
        await store.append_one_rep_max_record("u1", "k", T0 + timedelta(weeks=week), 100 + week)
    history = await store.list_one_rep_max_records("u1", ["k", "missing"], 3)
    assert [e.estimate for e in history["k"]] == [101, 102, 103]
    assert history["missing"] == []


async def test_best_estimate_covers_history_beyond_read_limit(store):
    await store.append_one_rep_max_record("u1", "k", T0, 150.0)
    for week in range(1, 6):
        await store.append_one_rep_max_record("u1", "k", T0 + timedelta(weeks=week), 100.0)
    await store.append_one_rep_max_record("u1", "other", T0, 60.0)

    recent = await store.list_one_rep_max_records("u1", ["k"], 3)
    assert max(e.estimate for e in recent["k"]) == 100.0
    assert await store.get_best_one_rep_max_estimates("u1", ["k", "missing"]) == {"k": 150.0}
    assert await store.get_best_one_rep_max_estimates("u1", []) == {}


async def test_estimate_upsert_and_reset_keeps_history(store):
    key = "lib1_Squat"
    await store.append_one_rep_max_record("u1", key, T0, 150.0)
    await store.set_one_rep_max_estimate(
        "u1",
        OneRepMaxEstimateRead(
            exercise_key=key,
            current=150.0,
            last_updated=T0,
            achieved_with=AchievedWith(weight=120, reps=5),
        ),
    )
    await store.set_one_rep_max_estimate("u1", OneRepMaxEstimateRead(exercise_key=key, current=155.0, last_updated=T0))
    estimates = await store.get_one_rep_max_estimates("u1")
    assert estimates[key].current == 155.0

    await store.clear_one_rep_max_estimate("u1", key)
    estimates = await store.get_one_rep_max_estimates("u1")
    assert estimates[key].current is None
    assert estimates[key].achieved_with is None
    assert len((await store.list_one_rep_max_records("u1", [key], 200))[key]) == 1


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------

async def test_exercise_history_newest_first(store):
    await store.add_exercise_history("u1", "k", "s1", T0, [{"reps": 5, "weight": 100}])
    await store.add_exercise_history("u1", "k", "s2", T0 + timedelta(days=2), [{"reps": 6, "weight": 100}])
    entries = await store.list_exercise_history("u1", "k", 50)
    assert [e["session_id"] for e in entries] == ["s2", "s1"]
    assert entries[1]["sets"] == [{"reps": 5, "weight": 100}]


async def test_session_history_recompletion_overwrites(store):
    record = {
        "session_id": "s1",
        "course_id": "c1",
        "course_name": "Strength Block",
        "session_name": "Push Day",
        "completed_at": T0,
        "duration_minutes": 40,
        "exercises": {},
    }
    await store.put_session_history("u1", record)
    await store.put_session_history("u1", {**record, "duration_minutes": 55})
    stored = await store.get_session_history("u1", "s1")
    assert stored["duration_minutes"] == 55
    assert stored["completed_at"] == T0
    assert await store.get_session_history("u1", "s2") is None


# ---------------------------------------------------------------------------
# Course progress
# ---------------------------------------------------------------------------

async def test_completed_sessions_never_duplicate(store):
    await store.record_course_completion("u1", "c1", "s1", T0)
    await store.record_course_completion("u1", "c1", "s2", T0 + timedelta(days=1))
    await store.record_course_completion("u1", "c1", "s1", T0 + timedelta(days=2))

    progress = await store.get_course_progress("u1", "c1")
    assert progress.total_sessions_completed == 3
    assert progress.all_sessions_completed == ["s1", "s2"]
    assert progress.last_session_completed == "s1"
    assert progress.last_activity == T0 + timedelta(days=2)


async def test_completion_without_marking_only_counts(store):
    await store.record_course_completion("u1", "c1", "s1", T0, mark_completed=False)
    progress = await store.get_course_progress("u1", "c1")
    assert progress.total_sessions_completed == 1
    assert progress.all_sessions_completed == []


async def test_missing_progress_is_none(store):
    assert await store.get_course_progress("u1", "nope") is None


# ---------------------------------------------------------------------------
# Weekly streak
# ---------------------------------------------------------------------------

async def test_streak_round_trip(store):
    state = WeeklyStreakRead(
        user_id="u1",
        course_id="c1",
        current_streak=4,
        sessions_completed_this_week=2,
        week_start="2025-W10",
        last_workout_date=T0,
    )
    await store.save_weekly_streak(state)
    await store.save_weekly_streak(state.model_copy(update={"sessions_completed_this_week": 3}))
    stored = await store.get_weekly_streak("u1", "c1")
    assert stored.current_streak == 4
    assert stored.sessions_completed_this_week == 3
    assert stored.last_workout_date == T0
    assert await store.get_weekly_streak("u1", "c2") is None
