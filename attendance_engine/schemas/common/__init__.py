from attendance_engine.schemas.common.base import BaseFilterSchema, BaseSchema, aliases
from attendance_engine.schemas.common.enums import (
    AttendanceBand,
    AttendanceStatus,
    ExportFormat,
    QueryMode,
    QueryStatus,
    Session,
    StatusFilter,
)

__all__ = [
    "AttendanceBand",
    "AttendanceStatus",
    "BaseFilterSchema",
    "BaseSchema",
    "ExportFormat",
    "QueryMode",
    "QueryStatus",
    "Session",
    "StatusFilter",
    "aliases",
]
