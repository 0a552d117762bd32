"""
Report rendering: screen tables and exported documents for single-day and
date-range attendance.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from reportlab.platypus.doctemplate import LayoutError

from attendance_engine.core.exceptions import ReportExportError
from attendance_engine.schemas.attendance.attendance_record import AttendanceRecord
from attendance_engine.schemas.attendance.attendance_report import (
    ConsolidatedRangeAttendance,
    DayPartition,
    ReportMeta,
    SessionPartition,
    TableView,
)
from attendance_engine.schemas.common.enums import AttendanceBand, ExportFormat, Session
from attendance_engine.services.attendance.consolidation_service import (
    DEFAULT_GOOD_THRESHOLD,
    DEFAULT_WARNING_THRESHOLD,
    attendance_band,
)
from attendance_engine.utils.excel_utils import AttendanceExcelGenerator
from attendance_engine.utils.formatters import AttendanceFormatter
from attendance_engine.utils.pdf_utils import AttendancePDFGenerator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    header: str
    value: Callable[[Any], str]


def _session_ratio(session: Session) -> Callable[[ConsolidatedRangeAttendance], str]:
    def value(row: ConsolidatedRangeAttendance) -> str:
        tally = row.sessions.get(session)
        if tally is None:
            return "-/-"
        return AttendanceFormatter.format_ratio(tally.present, tally.total)
    return value


DAY_COLUMNS = (
    Column("Roll Number", lambda r: r.display_roll),
    Column("Name", lambda r: r.student_name),
    Column("Status", lambda r: AttendanceFormatter.format_status(r.status)),
)

RANGE_COLUMNS = (
    Column("Roll No", lambda r: r.display_roll),
    Column("Name", lambda r: r.student_name),
    Column("Days", lambda r: str(r.days_conducted)),
    Column("FN (P/T)", _session_ratio(Session.FN)),
    Column("AN (P/T)", _session_ratio(Session.AN)),
    Column("Conducted", lambda r: str(r.total_conducted)),
    Column("Attended", lambda r: str(r.total_attended)),
    Column("Attendance %", lambda r: AttendanceFormatter.format_percentage(r.percentage)),
)

DAY_TITLE = "Attendance Sheet"
RANGE_TITLE = "Overall Attendance Summary"

ReportRows = Union[DayPartition, Sequence[AttendanceRecord], Sequence[ConsolidatedRangeAttendance]]


def render_table(rows: Iterable[Any], columns: Sequence[Column]) -> TableView:
    """Plain-string table for display."""
    return TableView(
        headers=[c.header for c in columns],
        rows=[[c.value(row) for c in columns] for row in rows],
    )


class ReportRenderer:
    """
    Builds PDF and xlsx documents from query results.

    Output depends only on the rows and the metadata passed in: two calls
    with equal input return identical bytes.
    """

    def __init__(
        self,
        institution: Optional[str] = None,
        good_threshold: float = DEFAULT_GOOD_THRESHOLD,
        warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
    ):
        self.institution = institution
        self.good_threshold = good_threshold
        self.warning_threshold = warning_threshold
        self.pdf = AttendancePDFGenerator()
        self.excel = AttendanceExcelGenerator()

    # ------------------------------------------------------------------ #
    # Tables
    # ------------------------------------------------------------------ #
    def day_table(self, records: Iterable[AttendanceRecord]) -> TableView:
        return render_table(records, DAY_COLUMNS)

    def range_table(self, consolidated: Iterable[ConsolidatedRangeAttendance]) -> TableView:
        return render_table(consolidated, RANGE_COLUMNS)

    def band(self, percentage: float) -> AttendanceBand:
        return attendance_band(percentage, self.good_threshold, self.warning_threshold)

    # ------------------------------------------------------------------ #
    # Documents
    # ------------------------------------------------------------------ #
    def render_document(self, rows: ReportRows, meta: ReportMeta) -> bytes:
        """
        PDF for any query result: a DayPartition (both sessions), one
        session's records (session taken from meta), or consolidated range
        rows.
        """
        if isinstance(rows, DayPartition):
            return self._day_document(rows.sessions, meta)

        rows = list(rows)
        if rows and isinstance(rows[0], ConsolidatedRangeAttendance):
            return self.export_range(rows, meta)
        if meta.from_date and meta.to_date and not meta.date:
            return self.export_range(rows, meta)
        return self.export_day(meta.session or Session.FN, rows, meta)

    def export_day(self, session: Session, records: Sequence[AttendanceRecord], meta: ReportMeta) -> bytes:
        """One session's attendance sheet with its present/absent summary."""
        session = Session.parse(session)
        partition = SessionPartition.from_records(session, [r for r in records if r.session is session])
        return self._day_document([partition], meta.model_copy(update={"session": session}))

    def export_range(self, consolidated: Sequence[ConsolidatedRangeAttendance], meta: ReportMeta) -> bytes:
        """Consolidated range table with the percentage column colour-banded."""
        table = self.range_table(consolidated)
        band_column = len(RANGE_COLUMNS) - 1
        styles = [
            self.pdf.band_style(band_column, row_idx, self.band(row.percentage))
            for row_idx, row in enumerate(consolidated, start=1)
        ]
        below = sum(1 for row in consolidated if row.percentage < self.good_threshold)

        content = [
            {'type': 'table', 'headers': table.headers, 'data': table.rows, 'extra_styles': styles},
            {'type': 'spacer', 'height': 10},
            {
                'type': 'paragraph',
                'text': (
                    f"Students: {len(table.rows)}, below "
                    f"{AttendanceFormatter.format_percentage(self.good_threshold)}: {below}"
                ),
            },
        ]
        return self._build_pdf(meta.title or RANGE_TITLE, meta, content)

    def export_range_workbook(self, consolidated: Sequence[ConsolidatedRangeAttendance], meta: ReportMeta) -> bytes:
        table = self.range_table(consolidated)
        try:
            return self.excel.render(
                sheet_name="Attendance",
                title=meta.title or RANGE_TITLE,
                headers=table.headers,
                data=table.rows,
                header_fields=meta.header_fields(),
                row_bands=[self.band(row.percentage) for row in consolidated],
                band_column=len(RANGE_COLUMNS) - 1,
            )
        except (ValueError, TypeError) as e:
            logger.error(f"export_range_workbook failed: {e}", exc_info=True)
            raise ReportExportError(f"Could not build workbook: {e}", export_format=ExportFormat.XLSX.value) from e

    def suggested_filename(self, meta: ReportMeta, export_format: ExportFormat = ExportFormat.PDF) -> str:
        ext = ExportFormat(export_format).value
        if meta.from_date and meta.to_date:
            return f"overall-attendance-{meta.from_date.isoformat()}-to-{meta.to_date.isoformat()}.{ext}"
        day = meta.date.isoformat() if meta.date else "unknown"
        if meta.session:
            return f"attendance-{day}-{meta.session.value}.{ext}"
        return f"attendance-{day}.{ext}"

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _day_document(self, partitions: List[SessionPartition], meta: ReportMeta) -> bytes:
        content = []
        for partition in partitions:
            table = self.day_table(partition.records)
            if len(partitions) > 1:
                content.append({'type': 'heading', 'text': f"{partition.session.value} Session"})
            content.append({'type': 'table', 'headers': table.headers, 'data': table.rows})
            content.append({'type': 'spacer', 'height': 8})
            content.append({
                'type': 'paragraph',
                'text': (
                    f"{partition.session.value}: Total {partition.total}, "
                    f"Present {partition.present}, Absent {partition.absent}"
                ),
            })
        return self._build_pdf(meta.title or DAY_TITLE, meta, content)

    def _build_pdf(self, title: str, meta: ReportMeta, content: List[dict]) -> bytes:
        try:
            return self.pdf.render(
                title=title,
                institution=meta.institution or self.institution,
                header_fields=meta.header_fields(),
                content=content,
            )
        except (LayoutError, ValueError) as e:
            logger.error(f"PDF render failed for '{title}': {e}", exc_info=True)
            raise ReportExportError(f"Could not build PDF: {e}", export_format=ExportFormat.PDF.value) from e
