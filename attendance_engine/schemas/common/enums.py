"""
Enumeration types used across the engine.
"""

from enum import Enum
from typing import Any

__all__ = [
    "Session",
    "AttendanceStatus",
    "StatusFilter",
    "QueryMode",
    "QueryStatus",
    "AttendanceBand",
    "ExportFormat",
]


class Session(str, Enum):
    """Sub-day teaching slot."""

    FN = "FN"  # forenoon
    AN = "AN"  # afternoon

    @classmethod
    def parse(cls, value: Any) -> "Session":
        """Case-insensitive lookup that also accepts the legacy spellings."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Invalid session: {value!r}")
        key = value.strip().lower()
        if key in ("fn", "morning", "forenoon"):
            return cls.FN
        if key in ("an", "noon", "afternoon"):
            return cls.AN
        raise ValueError(f"Invalid session: {value!r}")

    @classmethod
    def _missing_(cls, value: Any):
        try:
            return cls.parse(value)
        except ValueError:
            return None


class AttendanceStatus(str, Enum):
    """Attendance status of one student in one session."""

    PRESENT = "present"
    ABSENT = "absent"

    @classmethod
    def parse(cls, value: Any) -> "AttendanceStatus":
        """Accepts the string form in any case and the numeric 1/0 encoding."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.PRESENT if value else cls.ABSENT
        if isinstance(value, int):
            if value in (0, 1):
                return cls.PRESENT if value == 1 else cls.ABSENT
            raise ValueError(f"Invalid attendance status: {value!r}")
        if isinstance(value, str):
            key = value.strip().lower()
            if key in ("present", "p", "1"):
                return cls.PRESENT
            if key in ("absent", "a", "0"):
                return cls.ABSENT
        raise ValueError(f"Invalid attendance status: {value!r}")

    @classmethod
    def _missing_(cls, value: Any):
        try:
            return cls.parse(value)
        except ValueError:
            return None


class StatusFilter(str, Enum):
    """Status narrowing applied to single-day listings."""

    ALL = "all"
    PRESENT = "present"
    ABSENT = "absent"


class QueryMode(str, Enum):
    """The two independent query modes."""

    SINGLE = "single"
    RANGE = "range"


class QueryStatus(str, Enum):
    """Lifecycle of the derived result held for one query mode."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    EMPTY = "empty"
    FAILED = "failed"


class AttendanceBand(str, Enum):
    """Display band for an attendance percentage."""

    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"


class ExportFormat(str, Enum):
    """Supported document formats."""

    PDF = "pdf"
    XLSX = "xlsx"
