"""
In-memory roster cache keyed by (faculty_id, course_id).

Course lists are stored under (faculty_id, None). Entries expire after the
configured TTL; callers invalidate explicitly when they refresh a faculty's
course list.
"""

import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

logger = logging.getLogger(__name__)

CacheKey = Tuple[str, Optional[str]]


class RosterCache:
    """TTL cache with caller-controlled invalidation."""

    def __init__(
        self,
        default_ttl: Optional[int] = 300,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._entries: Dict[CacheKey, Dict[str, Any]] = {}
        self._default_ttl = default_ttl
        self._clock = clock

    def get(self, faculty_id: str, course_id: Optional[str] = None) -> Optional[Any]:
        key = (faculty_id, course_id)
        entry = self._entries.get(key)
        if entry is None:
            return None

        if entry["expires"] is not None and self._clock() >= entry["expires"]:
            del self._entries[key]
            logger.debug(f"Roster cache expired: {key}")
            return None

        return entry["value"]

    def set(
        self,
        faculty_id: str,
        course_id: Optional[str],
        value: Any,
        ttl: Optional[int] = None,
    ) -> None:
        """Store a value. A TTL of None never expires; zero or less disables caching."""
        ttl = self._default_ttl if ttl is None else ttl
        key = (faculty_id, course_id)
        if ttl is not None and ttl <= 0:
            self._entries.pop(key, None)
            return
        self._entries[key] = {
            "value": value,
            "expires": None if ttl is None else self._clock() + ttl,
        }

    def invalidate(self, faculty_id: str, course_id: Optional[str] = None) -> bool:
        """Drop one entry. Returns True if it was cached."""
        return self._entries.pop((faculty_id, course_id), None) is not None

    def invalidate_faculty(self, faculty_id: str) -> int:
        """Drop the course list and every roster cached for a faculty."""
        keys = [key for key in self._entries if key[0] == faculty_id]
        for key in keys:
            del self._entries[key]
        if keys:
            logger.debug(f"Roster cache invalidated {len(keys)} entries for faculty {faculty_id}")
        return len(keys)

    def clear(self) -> int:
        count = len(self._entries)
        self._entries.clear()
        return count

    def __len__(self) -> int:
        return len(self._entries)
