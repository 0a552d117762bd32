"""
Roster store access: course assignments and per-course student rosters.
"""

import logging
from typing import List

from pydantic import ValidationError as PydanticValidationError

from attendance_engine.core.exceptions import RecordStoreError
from attendance_engine.repositories.base_repository import BaseStoreRepository
from attendance_engine.schemas.roster.roster import CourseSummary, StudentDetails

logger = logging.getLogger(__name__)


class RosterRepository(BaseStoreRepository):
    """
    Reads from:
        GET roster/faculty/{facultyId}                   -> course list
        GET roster/faculty/{facultyId}/course/{courseId} -> assigned students

    Rows are returned as the store sends them, duplicates included.
    """

    store_name = "roster store"

    async def fetch_courses(self, faculty_id: str) -> List[CourseSummary]:
        path = f"roster/faculty/{faculty_id}"
        rows = await self._get_list(path, empty_on_not_found=True)
        try:
            return [CourseSummary.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            raise RecordStoreError(
                f"{self.store_name} returned a malformed course row: {e.errors()[0]['msg']}",
                store=self.store_name,
                path=path,
            ) from e

    async def fetch_roster(self, faculty_id: str, course_id: str) -> List[StudentDetails]:
        path = f"roster/faculty/{faculty_id}/course/{course_id}"
        rows = await self._get_list(path, empty_on_not_found=True)
        try:
            return [StudentDetails.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            raise RecordStoreError(
                f"{self.store_name} returned a malformed student row: {e.errors()[0]['msg']}",
                store=self.store_name,
                path=path,
            ) from e
