"""
Attendance report service.

Request-level facade used by the HTTP layer:
- Course lists and per-course filter options
- Single-day reports partitioned by session
- Date-range reports consolidated per student
- PDF / xlsx exports and saving them to the export directory
"""

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from attendance_engine.core.exceptions import (
    BaseAppException,
    QueryNotReadyError,
    ValidationError,
)
from attendance_engine.schemas.attendance.attendance_filters import FilterContext
from attendance_engine.schemas.attendance.attendance_report import (
    ConsolidatedRangeAttendance,
    DayPartition,
)
from attendance_engine.schemas.common.enums import ExportFormat, QueryMode, Session, StatusFilter
from attendance_engine.schemas.roster.roster import CourseSummary, OptionSets
from attendance_engine.services.attendance.attendance_query_service import AttendanceQueryService
from attendance_engine.services.attendance.consolidation_service import (
    apply_record_filters,
    apply_summary_filters,
    consolidate,
    filter_by_status,
    partition_by_session,
)
from attendance_engine.services.attendance.filter_state_service import FilterStateMachine
from attendance_engine.services.attendance.report_renderer import ReportRenderer
from attendance_engine.services.base import ErrorCode, ErrorSeverity, ServiceError, ServiceResult
from attendance_engine.services.roster.roster_service import RosterService
from attendance_engine.utils.file_utils import FileHelper

logger = logging.getLogger(__name__)

MEDIA_TYPES = {
    ExportFormat.PDF: "application/pdf",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@dataclass(frozen=True)
class ExportedDocument:
    filename: str
    media_type: str
    content: bytes


class AttendanceReportService:
    """
    Service for producing attendance reports on behalf of a faculty member.

    Responsibilities:
    - Validate filter selections against the faculty's roster
    - Query the attendance store and consolidate the rows
    - Render and export documents
    """

    def __init__(
        self,
        roster: RosterService,
        queries: AttendanceQueryService,
        renderer: ReportRenderer,
        export_dir: Union[str, Path] = "exports",
        max_range_days: int = 366,
        today: Callable[[], date] = date.today,
    ):
        """
        Initialize report service.

        Args:
            roster: Roster resolver (courses and students per faculty)
            queries: Attendance store queries
            renderer: Document renderer
            export_dir: Directory used by save_export
            max_range_days: Longest accepted date range, inclusive
            today: Clock used for future-date checks
        """
        self.roster = roster
        self.queries = queries
        self.renderer = renderer
        self.export_dir = export_dir
        self.max_range_days = max_range_days
        self._today = today

    # ------------------------------------------------------------------ #
    # Roster
    # ------------------------------------------------------------------ #
    async def list_courses(
        self,
        faculty_id: str,
        refresh: bool = False,
    ) -> ServiceResult[List[CourseSummary]]:
        operation = "list_courses"
        logger.info(f"{operation}: faculty_id={faculty_id}, refresh={refresh}")
        try:
            courses = await self.roster.resolve_courses(faculty_id, refresh=refresh)
            return ServiceResult.success(
                courses,
                metadata={"count": len(courses), "empty": not courses},
            )
        except BaseAppException as e:
            return self._handle_exception(operation, e)

    async def course_options(
        self,
        faculty_id: str,
        course_id: str,
    ) -> ServiceResult[OptionSets]:
        operation = "course_options"
        logger.info(f"{operation}: faculty_id={faculty_id}, course_id={course_id}")
        try:
            course = await self.roster.find_course(faculty_id, course_id)
            if course is None:
                return self._course_not_found(faculty_id, course_id)
            options = await self.roster.option_sets(faculty_id, course_id)
            return ServiceResult.success(options, metadata={"course_name": course.display_name})
        except BaseAppException as e:
            return self._handle_exception(operation, e)

    # ------------------------------------------------------------------ #
    # Reports
    # ------------------------------------------------------------------ #
    async def day_report(
        self,
        faculty_id: str,
        course_id: str,
        on_date: Optional[date],
        department: Optional[str] = None,
        batch: Optional[str] = None,
        semester: Optional[str] = None,
        status_filter: StatusFilter = StatusFilter.ALL,
    ) -> ServiceResult[DayPartition]:
        """
        One day's attendance for a course, split into FN and AN.

        Returns:
            ServiceResult containing the DayPartition; metadata["empty"] is
            set when no record matched the selection.
        """
        operation = "day_report"
        logger.info(
            f"{operation}: faculty_id={faculty_id}, course_id={course_id}, "
            f"date={on_date}, status={StatusFilter(status_filter).value}"
        )
        try:
            context = await self._build_context(
                faculty_id,
                QueryMode.SINGLE,
                course_id,
                department=department,
                batch=batch,
                semester=semester,
                date=on_date,
            )
            partition = await self._day_partition(faculty_id, context, StatusFilter(status_filter))

            logger.info(f"{operation} successful: {partition.summary()}")
            return ServiceResult.success(
                partition,
                metadata={
                    "context": context,
                    "summary": partition.summary(),
                    "empty": partition.is_empty,
                },
            )
        except BaseAppException as e:
            return self._handle_exception(operation, e)

    async def range_report(
        self,
        faculty_id: str,
        course_id: str,
        from_date: Optional[date],
        to_date: Optional[date],
        department: Optional[str] = None,
        batch: Optional[str] = None,
        semester: Optional[str] = None,
    ) -> ServiceResult[List[ConsolidatedRangeAttendance]]:
        """
        Consolidated attendance per student over an inclusive date range.
        """
        operation = "range_report"
        logger.info(
            f"{operation}: faculty_id={faculty_id}, course_id={course_id}, "
            f"date_range={from_date} to {to_date}"
        )

        if from_date and to_date:
            validation_result = self._validate_date_range(from_date, to_date, max_days=self.max_range_days)
            if not validation_result.is_success:
                return validation_result

        try:
            context = await self._build_context(
                faculty_id,
                QueryMode.RANGE,
                course_id,
                department=department,
                batch=batch,
                semester=semester,
                from_date=from_date,
                to_date=to_date,
            )
            consolidated = await self._consolidated(faculty_id, context)

            logger.info(f"{operation} successful: students={len(consolidated)}")
            return ServiceResult.success(
                consolidated,
                metadata={
                    "context": context,
                    "students": len(consolidated),
                    "days": (context.to_date - context.from_date).days + 1,
                    "empty": not consolidated,
                },
            )
        except BaseAppException as e:
            return self._handle_exception(operation, e)

    # ------------------------------------------------------------------ #
    # Exports
    # ------------------------------------------------------------------ #
    async def export_day_document(
        self,
        faculty_id: str,
        course_id: str,
        on_date: Optional[date],
        session: Optional[Union[Session, str]] = None,
        department: Optional[str] = None,
        batch: Optional[str] = None,
        semester: Optional[str] = None,
        status_filter: StatusFilter = StatusFilter.ALL,
    ) -> ServiceResult[ExportedDocument]:
        """
        PDF attendance sheet for one session, or for both sessions when
        `session` is omitted.
        """
        result = await self.day_report(
            faculty_id, course_id, on_date, department, batch, semester, status_filter
        )
        if not result.is_success:
            return result

        operation = "export_day_document"
        try:
            context: FilterContext = result.metadata["context"]
            partition: DayPartition = result.data
            meta = context.report_meta()
            if session:
                session = Session.parse(session)
                content = self.renderer.export_day(session, partition[session].records, meta)
                meta = meta.model_copy(update={"session": session})
            else:
                content = self.renderer.render_document(partition, meta)

            document = ExportedDocument(
                filename=self.renderer.suggested_filename(meta, ExportFormat.PDF),
                media_type=MEDIA_TYPES[ExportFormat.PDF],
                content=content,
            )
            logger.info(f"{operation} successful: {document.filename} ({len(content)} bytes)")
            return ServiceResult.success(document, metadata={"empty": partition.is_empty})
        except (BaseAppException, ValueError) as e:
            return self._handle_exception(operation, e)

    async def export_range_document(
        self,
        faculty_id: str,
        course_id: str,
        from_date: Optional[date],
        to_date: Optional[date],
        export_format: Union[ExportFormat, str] = ExportFormat.PDF,
        department: Optional[str] = None,
        batch: Optional[str] = None,
        semester: Optional[str] = None,
    ) -> ServiceResult[ExportedDocument]:
        result = await self.range_report(
            faculty_id, course_id, from_date, to_date, department, batch, semester
        )
        if not result.is_success:
            return result

        operation = "export_range_document"
        try:
            export_format = ExportFormat(export_format)
            context: FilterContext = result.metadata["context"]
            meta = context.report_meta()
            if export_format is ExportFormat.XLSX:
                content = self.renderer.export_range_workbook(result.data, meta)
            else:
                content = self.renderer.export_range(result.data, meta)

            document = ExportedDocument(
                filename=self.renderer.suggested_filename(meta, export_format),
                media_type=MEDIA_TYPES[export_format],
                content=content,
            )
            logger.info(f"{operation} successful: {document.filename} ({len(content)} bytes)")
            return ServiceResult.success(document, metadata={"empty": not result.data})
        except (BaseAppException, ValueError) as e:
            return self._handle_exception(operation, e)

    def save_export(
        self,
        document: ExportedDocument,
        directory: Optional[Union[str, Path]] = None,
    ) -> ServiceResult[Path]:
        """Write an exported document to disk; in-memory results are untouched on failure."""
        operation = "save_export"
        try:
            path = FileHelper.save_document(document.content, directory or self.export_dir, document.filename)
            return ServiceResult.success(path, message=f"Saved {path.name}")
        except BaseAppException as e:
            return self._handle_exception(operation, e)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    async def _build_context(
        self,
        faculty_id: str,
        mode: QueryMode,
        course_id: str,
        **filters: Any,
    ) -> FilterContext:
        """
        Apply the selections through a fresh state machine so request
        filters get the same validation as interactive ones.
        """
        machine = FilterStateMachine(faculty_id, self.roster, today=self._today)
        await machine.select_course(mode, course_id)
        for field, value in filters.items():
            if value is not None:
                machine.select_filter(mode, field, value)

        context = machine.context(mode)
        missing = context.missing_fields()
        if missing:
            raise QueryNotReadyError(missing)
        return context

    async def _day_partition(
        self,
        faculty_id: str,
        context: FilterContext,
        status_filter: StatusFilter,
    ) -> DayPartition:
        records = await self.queries.query_day(faculty_id, context.course_id, context.date)
        records = filter_by_status(apply_record_filters(records, context), status_filter)
        return partition_by_session(records)

    async def _consolidated(
        self,
        faculty_id: str,
        context: FilterContext,
    ) -> List[ConsolidatedRangeAttendance]:
        summaries = await self.queries.query_range(
            faculty_id, context.course_id, context.from_date, context.to_date
        )
        return consolidate(apply_summary_filters(summaries, context))

    def _validate_date_range(
        self,
        start_date: date,
        end_date: date,
        max_days: int = 366
    ) -> ServiceResult[None]:
        """
        Validate date range for reports.

        Args:
            start_date: Start date
            end_date: End date
            max_days: Maximum allowed days in range

        Returns:
            ServiceResult indicating validation success/failure
        """
        details = {"start_date": str(start_date), "end_date": str(end_date)}

        # Check start date is before end date
        if start_date > end_date:
            return ServiceResult.validation_failure(
                "Start date must be before or equal to end date",
                field="from_date",
                details=details,
            )

        # Check date range is not too large
        days_diff = (end_date - start_date).days + 1
        if days_diff > max_days:
            return ServiceResult.validation_failure(
                f"Date range cannot exceed {max_days} days",
                field="to_date",
                details={**details, "days": days_diff},
            )

        # Check dates are not in future
        if end_date > self._today():
            return ServiceResult.validation_failure(
                "End date cannot be in the future",
                field="to_date",
                details=details,
            )

        return ServiceResult.success(None)

    def _course_not_found(self, faculty_id: str, course_id: str) -> ServiceResult[Any]:
        return ServiceResult.failure(
            ServiceError(
                code=ErrorCode.RESOURCE_NOT_FOUND,
                message=f"Course {course_id} is not assigned to faculty {faculty_id}",
                severity=ErrorSeverity.WARNING,
                details={"faculty_id": faculty_id, "course_id": course_id},
                field="course_id",
                status_code=404,
            )
        )

    def _handle_exception(self, operation: str, exc: Exception) -> ServiceResult[Any]:
        if isinstance(exc, (ValidationError, QueryNotReadyError)):
            logger.warning(f"{operation} rejected: {exc}")
            details: Dict[str, Any] = dict(exc.details)
            details.setdefault("reason", exc.error_code.value)
            return ServiceResult.validation_failure(
                exc.message,
                field=getattr(exc, "field", None),
                details=details,
            )
        if isinstance(exc, BaseAppException):
            logger.error(f"{operation} failed: {exc}", exc_info=True)
            return ServiceResult.failure(ServiceError.from_exception(exc))

        logger.error(f"{operation} failed: {exc}", exc_info=True)
        return ServiceResult.failure(
            ServiceError(
                code=ErrorCode.INTERNAL_ERROR,
                message=str(exc),
                severity=ErrorSeverity.ERROR,
            )
        )
