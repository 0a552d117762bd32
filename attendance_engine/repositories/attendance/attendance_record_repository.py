"""
Attendance record store access.
"""

import logging
from datetime import date
from typing import List, Type, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from attendance_engine.core.exceptions import RecordStoreError
from attendance_engine.repositories.base_repository import BaseStoreRepository
from attendance_engine.schemas.attendance.attendance_record import (
    AttendanceRecord,
    SessionAttendanceSummary,
)

logger = logging.getLogger(__name__)

TRow = TypeVar("TRow", bound=BaseModel)


class AttendanceRecordRepository(BaseStoreRepository):
    """
    Reads from:
        GET attendance/day?facultyId&courseId&date
        GET attendance/range?facultyId&courseId&fromDate&toDate
    """

    store_name = "attendance store"

    async def fetch_day(
        self,
        faculty_id: str,
        course_id: str,
        on_date: date,
    ) -> List[AttendanceRecord]:
        rows = await self._get_list(
            "attendance/day",
            params={
                "facultyId": faculty_id,
                "courseId": course_id,
                "date": on_date.isoformat(),
            },
        )
        return self._parse("attendance/day", rows, AttendanceRecord)

    async def fetch_range(
        self,
        faculty_id: str,
        course_id: str,
        from_date: date,
        to_date: date,
    ) -> List[SessionAttendanceSummary]:
        rows = await self._get_list(
            "attendance/range",
            params={
                "facultyId": faculty_id,
                "courseId": course_id,
                "fromDate": from_date.isoformat(),
                "toDate": to_date.isoformat(),
            },
        )
        return self._parse("attendance/range", rows, SessionAttendanceSummary)

    def _parse(self, path: str, rows: list, model: Type[TRow]) -> List[TRow]:
        try:
            return [model.model_validate(row) for row in rows]
        except PydanticValidationError as e:
            logger.error(f"{self.store_name} malformed {model.__name__} row on {path}: {e}")
            raise RecordStoreError(
                f"{self.store_name} returned a malformed {model.__name__} row",
                store=self.store_name,
                path=path,
            ) from e
