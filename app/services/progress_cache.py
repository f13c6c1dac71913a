"""Time-boxed local snapshot cache of course progress."""

from __future__ import annotations

import time
from collections.abc import Callable
from dataclasses import dataclass

from app.schemas.progress import CourseProgressRead


@dataclass(frozen=True)
class CachedProgress:
    data: CourseProgressRead
    is_stale: bool


class ProgressCache:
    """Keyed by (user_id, course_id). Stale entries are still returned, flagged."""

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._entries: dict[tuple[str, str], tuple[CourseProgressRead, float]] = {}

    def get(self, user_id: str, course_id: str) -> CachedProgress | None:
        entry = self._entries.get((user_id, course_id))
        if entry is None:
            return None
        data, stored_at = entry
        return CachedProgress(data=data, is_stale=self.clock() - stored_at > self.ttl_seconds)

    def set(self, user_id: str, course_id: str, data: CourseProgressRead) -> None:
        self._entries[(user_id, course_id)] = (data, self.clock())

    def invalidate(self, user_id: str, course_id: str) -> None:
        self._entries.pop((user_id, course_id), None)

    def clear_user(self, user_id: str) -> int:
        """Drop every entry for a user (sign-out). Returns how many were removed."""
        keys = [key for key in self._entries if key[0] == user_id]
        for key in keys:
            del self._entries[key]
        return len(keys)
