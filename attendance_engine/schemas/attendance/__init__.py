"""
Attendance schemas package.

Raw store records, consolidated report rows and filter contexts.
"""

from attendance_engine.schemas.attendance.attendance_record import (
    AttendanceRecord,
    SessionAttendanceSummary,
)
from attendance_engine.schemas.attendance.attendance_report import (
    ConsolidatedRangeAttendance,
    DayPartition,
    ReportMeta,
    SessionPartition,
    SessionTally,
    TableView,
)
from attendance_engine.schemas.attendance.attendance_filters import (
    CASCADING_FIELDS,
    DATE_FIELDS,
    FilterContext,
    QueryKey,
)

__all__ = [
    # Records
    "AttendanceRecord",
    "SessionAttendanceSummary",
    # Report
    "ConsolidatedRangeAttendance",
    "DayPartition",
    "ReportMeta",
    "SessionPartition",
    "SessionTally",
    "TableView",
    # Filters
    "CASCADING_FIELDS",
    "DATE_FIELDS",
    "FilterContext",
    "QueryKey",
]
