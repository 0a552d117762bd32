"""
Attendance consolidation.

Pure transformations over records already fetched from the store:
- single-day partitioning by session with present/absent counts
- range consolidation of per-session summary rows into one row per student
- status and cascading-filter narrowing, percentage banding
"""

import logging
from typing import Dict, Iterable, List, Optional

from attendance_engine.core.exceptions import ConsolidationError
from attendance_engine.schemas.attendance.attendance_filters import CASCADING_FIELDS, FilterContext
from attendance_engine.schemas.attendance.attendance_record import (
    AttendanceRecord,
    SessionAttendanceSummary,
)
from attendance_engine.schemas.attendance.attendance_report import (
    ConsolidatedRangeAttendance,
    DayPartition,
    SessionPartition,
    SessionTally,
)
from attendance_engine.schemas.common.enums import (
    AttendanceBand,
    AttendanceStatus,
    Session,
    StatusFilter,
)

logger = logging.getLogger(__name__)

# Student attributes carried from the summary rows onto the consolidated row.
CARRIED_FIELDS = ("student_name", "roll_number", "department", "batch", "semester", "course_name")

DEFAULT_GOOD_THRESHOLD = 75.0
DEFAULT_WARNING_THRESHOLD = 60.0


def partition_by_session(records: Iterable[AttendanceRecord]) -> DayPartition:
    """
    Split one day's records into FN and AN partitions.

    Every record lands in exactly one partition (sessions are normalized on
    parse, so "fn" and "FN" are the same key). Sessions are never merged.
    """
    buckets: Dict[Session, List[AttendanceRecord]] = {Session.FN: [], Session.AN: []}
    for record in records:
        buckets[record.session].append(record)

    return DayPartition(
        fn=SessionPartition.from_records(Session.FN, buckets[Session.FN]),
        an=SessionPartition.from_records(Session.AN, buckets[Session.AN]),
    )


def consolidate(
    summaries: Iterable[SessionAttendanceSummary],
    strict: bool = False,
) -> List[ConsolidatedRangeAttendance]:
    """
    Merge per-session summary rows into one row per student.

    totalConducted and totalAttended are the sums of totalDays and
    presentCount over every row of the student, whatever the number of
    sessions or rows per session. Output follows first appearance order.

    Student attributes are assumed identical across a student's rows. When
    they differ the last row's values win and a warning is logged; with
    `strict=True` a ConsolidationError is raised instead.
    """
    groups: Dict[str, dict] = {}

    for row in summaries:
        group = groups.get(row.student_id)
        if group is None:
            group = groups[row.student_id] = {
                "conducted": 0,
                "attended": 0,
                "sessions": {},
                "meta": {},
            }
        else:
            _check_metadata(row, group["meta"], strict)

        group["conducted"] += row.total_days
        group["attended"] += row.present_count

        tally = group["sessions"].setdefault(row.session, {"present": 0, "total": 0})
        tally["present"] += row.present_count
        tally["total"] += row.total_days

        # last-seen wins
        group["meta"] = {name: getattr(row, name) for name in CARRIED_FIELDS}

    consolidated = []
    for student_id, group in groups.items():
        conducted, attended = group["conducted"], group["attended"]
        consolidated.append(
            ConsolidatedRangeAttendance(
                student_id=student_id,
                total_conducted=conducted,
                total_attended=attended,
                percentage=attendance_percentage(attended, conducted),
                sessions={
                    session: SessionTally(**group["sessions"][session])
                    for session in Session
                    if session in group["sessions"]
                },
                **group["meta"],
            )
        )
    return consolidated


def _check_metadata(row: SessionAttendanceSummary, previous: dict, strict: bool) -> None:
    for name in CARRIED_FIELDS:
        old, new = previous.get(name), getattr(row, name)
        if old == new:
            continue
        if strict:
            raise ConsolidationError(row.student_id, name, [old, new])
        logger.warning(
            f"consolidate: student {row.student_id} has conflicting {name} "
            f"({old!r} then {new!r}); keeping the last value"
        )


def attendance_percentage(attended: int, conducted: int) -> float:
    """attended/conducted*100, or 0 when nothing was conducted."""
    if conducted <= 0:
        return 0.0
    return attended / conducted * 100


def attendance_band(
    percentage: float,
    good_threshold: float = DEFAULT_GOOD_THRESHOLD,
    warning_threshold: float = DEFAULT_WARNING_THRESHOLD,
) -> AttendanceBand:
    if percentage >= good_threshold:
        return AttendanceBand.GOOD
    if percentage >= warning_threshold:
        return AttendanceBand.WARNING
    return AttendanceBand.CRITICAL


def filter_by_status(
    records: Iterable[AttendanceRecord],
    status_filter: StatusFilter = StatusFilter.ALL,
) -> List[AttendanceRecord]:
    if status_filter is StatusFilter.ALL:
        return list(records)
    wanted = AttendanceStatus(status_filter.value)
    return [r for r in records if r.status is wanted]


def _matches(row, context: Optional[FilterContext]) -> bool:
    if context is None:
        return True
    for name in CASCADING_FIELDS:
        wanted = getattr(context, name)
        if wanted and getattr(row, name) != wanted:
            return False
    return True


def apply_record_filters(
    records: Iterable[AttendanceRecord],
    context: Optional[FilterContext],
) -> List[AttendanceRecord]:
    """Narrow raw records by the context's department, batch and semester."""
    return [r for r in records if _matches(r, context)]


def apply_summary_filters(
    summaries: Iterable[SessionAttendanceSummary],
    context: Optional[FilterContext],
) -> List[SessionAttendanceSummary]:
    """Narrow summary rows by the context's department, batch and semester."""
    return [s for s in summaries if _matches(s, context)]
