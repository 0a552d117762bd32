"""
Attendance services package.

Filter state per query mode, store queries, stale-safe dispatching,
consolidation and report rendering.
"""

from attendance_engine.services.attendance.attendance_query_service import AttendanceQueryService
from attendance_engine.services.attendance.attendance_report_service import (
    AttendanceReportService,
    ExportedDocument,
)
from attendance_engine.services.attendance.consolidation_service import (
    apply_record_filters,
    apply_summary_filters,
    attendance_band,
    attendance_percentage,
    consolidate,
    filter_by_status,
    partition_by_session,
)
from attendance_engine.services.attendance.filter_state_service import (
    ChangeKind,
    FilterChangeEvent,
    FilterStateMachine,
)
from attendance_engine.services.attendance.query_dispatcher import QueryDispatcher, QueryState
from attendance_engine.services.attendance.report_renderer import (
    DAY_COLUMNS,
    RANGE_COLUMNS,
    ReportRenderer,
    render_table,
)

__all__ = [
    # Services
    "AttendanceQueryService",
    "AttendanceReportService",
    "ExportedDocument",
    "FilterStateMachine",
    "QueryDispatcher",
    "ReportRenderer",
    # State
    "ChangeKind",
    "FilterChangeEvent",
    "QueryState",
    # Consolidation
    "apply_record_filters",
    "apply_summary_filters",
    "attendance_band",
    "attendance_percentage",
    "consolidate",
    "filter_by_status",
    "partition_by_session",
    # Rendering
    "DAY_COLUMNS",
    "RANGE_COLUMNS",
    "render_table",
]
