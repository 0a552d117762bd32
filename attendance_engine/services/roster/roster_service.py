"""
Roster resolution: which courses a faculty member may query and which
students are assigned to them per course.
"""

import logging
from typing import List, Optional

from attendance_engine.repositories.roster import RosterRepository
from attendance_engine.schemas.roster.roster import CourseSummary, OptionSets, StudentDetails
from attendance_engine.services.cache.roster_cache import RosterCache

logger = logging.getLogger(__name__)


def _unique_by(items, key):
    """First occurrence of each key, in input order."""
    seen = set()
    unique = []
    for item in items:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        unique.append(item)
    return unique


class RosterService:
    """
    Read-only roster lookups with an explicit cache.

    Unknown faculty or faculty without assignments resolve to empty lists.
    Returned rosters contain each student once, even when the store lists a
    student under several overlapping assignment records.
    """

    def __init__(self, repository: RosterRepository, cache: Optional[RosterCache] = None):
        self.repository = repository
        self.cache = cache if cache is not None else RosterCache()

    async def resolve_courses(self, faculty_id: str, refresh: bool = False) -> List[CourseSummary]:
        """
        Courses assigned to a faculty member, de-duplicated by course id.

        Args:
            faculty_id: Authenticated faculty identifier
            refresh: Drop every cached entry for this faculty first
        """
        if not faculty_id:
            return []
        if refresh:
            self.cache.invalidate_faculty(faculty_id)

        cached = self.cache.get(faculty_id)
        if cached is not None:
            return list(cached)

        rows = await self.repository.fetch_courses(faculty_id)
        courses = _unique_by(rows, lambda c: c.course_id)
        logger.info(f"resolve_courses: faculty_id={faculty_id}, courses={len(courses)}")

        self.cache.set(faculty_id, None, courses)
        return list(courses)

    async def find_course(self, faculty_id: str, course_id: str) -> Optional[CourseSummary]:
        for course in await self.resolve_courses(faculty_id):
            if course.course_id == course_id:
                return course
        return None

    async def resolve_roster(self, faculty_id: str, course_id: str) -> List[StudentDetails]:
        """Students assigned to the faculty for one course, first occurrence wins."""
        if not faculty_id or not course_id:
            return []

        cached = self.cache.get(faculty_id, course_id)
        if cached is not None:
            return list(cached)

        rows = await self.repository.fetch_roster(faculty_id, course_id)
        roster = _unique_by(rows, lambda s: s.student_id)

        if len(roster) != len(rows):
            logger.debug(
                f"resolve_roster: dropped {len(rows) - len(roster)} duplicate rows "
                f"for faculty_id={faculty_id}, course_id={course_id}"
            )

        self.cache.set(faculty_id, course_id, roster)
        return list(roster)

    async def option_sets(self, faculty_id: str, course_id: str) -> OptionSets:
        """Batch/department/semester options for a course's roster."""
        return OptionSets.from_roster(await self.resolve_roster(faculty_id, course_id))
