"""Course progress counters with a read-through snapshot cache."""

from __future__ import annotations

import logging
from datetime import datetime

from app.repositories.performance_store import PerformanceStore
from app.schemas.progress import CourseProgressRead
from app.services.progress_cache import ProgressCache

logger = logging.getLogger(__name__)


class CourseProgressService:
    def __init__(self, store: PerformanceStore, cache: ProgressCache):
        self.store = store
        self.cache = cache

    async def get_progress(
        self, user_id: str, course_id: str, force_refresh: bool = False
    ) -> CourseProgressRead | None:
        if not force_refresh:
            cached = self.cache.get(user_id, course_id)
            if cached is not None and not cached.is_stale:
                return cached.data

        progress = await self.store.get_course_progress(user_id, course_id)
        if progress is None:
            self.cache.invalidate(user_id, course_id)
        else:
            self.cache.set(user_id, course_id, progress)
        return progress

    async def record_completion(
        self,
        user_id: str,
        course_id: str,
        session_id: str,
        completed_at: datetime,
        mark_completed: bool = True,
    ) -> CourseProgressRead | None:
        """
        Count a completed session. The counter and the completed-session set are
        updated with commutative writes; re-completing a session bumps the
        counter but never duplicates the id. `mark_completed=False` is used when
        the session carried no exercise data.
        """
        await self.store.record_course_completion(
            user_id, course_id, session_id, completed_at, mark_completed=mark_completed
        )
        self.cache.invalidate(user_id, course_id)
        logger.info(
            "Course progress updated",
            extra={"user_id": user_id, "course_id": course_id, "session_id": session_id},
        )
        return await self.get_progress(user_id, course_id, force_refresh=True)
