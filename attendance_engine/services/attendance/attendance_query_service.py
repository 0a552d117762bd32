"""
Attendance query service.

Thin validation layer over the attendance store: checks that a query has
every required filter before any request is made, and returns the store's
rows untouched. Narrowing by department/batch/semester happens afterwards
via the consolidation helpers.
"""

import logging
from datetime import date
from typing import List, Optional

from attendance_engine.core.exceptions import ErrorCode, FilterValidationError, QueryNotReadyError
from attendance_engine.repositories.attendance import AttendanceRecordRepository
from attendance_engine.schemas.attendance.attendance_record import (
    AttendanceRecord,
    SessionAttendanceSummary,
)

logger = logging.getLogger(__name__)


def _require(**values) -> None:
    missing = [name for name, value in values.items() if not value]
    if missing:
        raise QueryNotReadyError(missing)


class AttendanceQueryService:
    """Single-day and date-range queries against the attendance store."""

    def __init__(self, repository: AttendanceRecordRepository):
        self.repository = repository

    async def query_day(
        self,
        faculty_id: str,
        course_id: Optional[str],
        on_date: Optional[date],
    ) -> List[AttendanceRecord]:
        """
        Raw records for one course on one day, both sessions.

        Raises:
            QueryNotReadyError: course or date missing
            RecordStoreError: store unreachable or failing
        """
        _require(faculty_id=faculty_id, course_id=course_id, date=on_date)

        records = await self.repository.fetch_day(faculty_id, course_id, on_date)
        logger.info(
            f"query_day: faculty_id={faculty_id}, course_id={course_id}, "
            f"date={on_date}, records={len(records)}"
        )
        return records

    async def query_range(
        self,
        faculty_id: str,
        course_id: Optional[str],
        from_date: Optional[date],
        to_date: Optional[date],
    ) -> List[SessionAttendanceSummary]:
        """
        Per-session summary rows for every student of a course over an
        inclusive date range.

        Raises:
            QueryNotReadyError: course or either bound missing
            FilterValidationError: from_date after to_date
            RecordStoreError: store unreachable or failing
        """
        _require(faculty_id=faculty_id, course_id=course_id, from_date=from_date, to_date=to_date)
        if from_date > to_date:
            raise FilterValidationError(
                "from_date must be before or equal to to_date",
                field="from_date",
                value=from_date,
                error_code=ErrorCode.INVALID_DATE_RANGE,
            )

        summaries = await self.repository.fetch_range(faculty_id, course_id, from_date, to_date)
        logger.info(
            f"query_range: faculty_id={faculty_id}, course_id={course_id}, "
            f"from={from_date}, to={to_date}, rows={len(summaries)}"
        )
        return summaries
