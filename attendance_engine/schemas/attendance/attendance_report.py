"""
Attendance reporting schemas: single-day session partitions, consolidated
range rows and report metadata.
"""

from datetime import date as Date
from typing import Dict, List, Union

from pydantic import Field, computed_field, model_validator

from attendance_engine.schemas.attendance.attendance_record import AttendanceRecord
from attendance_engine.schemas.common.base import BaseSchema
from attendance_engine.schemas.common.enums import Session

__all__ = [
    "SessionTally",
    "SessionPartition",
    "DayPartition",
    "ConsolidatedRangeAttendance",
    "ReportMeta",
    "TableView",
]


class SessionTally(BaseSchema):
    """Present/total counts for one session type over a range."""

    present: int = Field(0, ge=0)
    total: int = Field(0, ge=0)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percentage(self) -> float:
        return self.present / self.total * 100 if self.total > 0 else 0.0


class SessionPartition(BaseSchema):
    """
    All records of one session on one day with their counts.

    Invariant: total == present + absent == len(records).
    """

    session: Session
    records: List[AttendanceRecord] = Field(default_factory=list)
    total: int = Field(0, ge=0)
    present: int = Field(0, ge=0)
    absent: int = Field(0, ge=0)

    @model_validator(mode="after")
    def validate_counts(self):
        if self.total != self.present + self.absent:
            raise ValueError("total must equal present + absent")
        if self.total != len(self.records):
            raise ValueError("total must equal the number of records")
        return self

    @classmethod
    def from_records(cls, session: Session, records: List[AttendanceRecord]) -> "SessionPartition":
        present = sum(1 for r in records if r.is_present)
        return cls(
            session=session,
            records=list(records),
            total=len(records),
            present=present,
            absent=len(records) - present,
        )


class DayPartition(BaseSchema):
    """Single-day breakdown keyed by session; both sessions always present."""

    fn: SessionPartition = Field(default_factory=lambda: SessionPartition(session=Session.FN))
    an: SessionPartition = Field(default_factory=lambda: SessionPartition(session=Session.AN))

    def __getitem__(self, session: Union[Session, str]) -> SessionPartition:
        return self.fn if Session.parse(session) is Session.FN else self.an

    @property
    def sessions(self) -> List[SessionPartition]:
        return [self.fn, self.an]

    @property
    def total(self) -> int:
        return self.fn.total + self.an.total

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    def summary(self) -> Dict[str, Dict[str, int]]:
        """{session: {total, present, absent}} for report footers."""
        return {
            p.session.value: {"total": p.total, "present": p.present, "absent": p.absent}
            for p in self.sessions
        }


class ConsolidatedRangeAttendance(BaseSchema):
    """
    One student's attendance across every session in a date range.

    totalConducted and totalAttended are sums over all of the student's
    summary rows; percentage is left unrounded.
    """

    student_id: str
    student_name: str = ""
    roll_number: Union[str, None] = None
    department: str = ""
    batch: str = ""
    semester: str = ""
    course_name: str = ""
    total_conducted: int = Field(0, ge=0)
    total_attended: int = Field(0, ge=0)
    percentage: float = Field(0.0, ge=0)
    sessions: Dict[Session, SessionTally] = Field(default_factory=dict)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def days_conducted(self) -> int:
        """Distinct teaching days: the larger of the per-session totals."""
        return max((t.total for t in self.sessions.values()), default=0)

    @property
    def display_roll(self) -> str:
        return self.roll_number or self.student_id


class ReportMeta(BaseSchema):
    """
    Header metadata for exported reports. Only fields that are set are
    printed in document headers.
    """

    title: Union[str, None] = None
    institution: Union[str, None] = None
    course_name: Union[str, None] = None
    date: Union[Date, None] = None
    from_date: Union[Date, None] = None
    to_date: Union[Date, None] = None
    session: Union[Session, None] = None
    department: Union[str, None] = None
    batch: Union[str, None] = None
    semester: Union[str, None] = None

    def header_fields(self) -> List[tuple]:
        """(label, value) pairs for the fields that are set, in print order."""
        fields = [
            ("Course", self.course_name),
            ("Date", self.date.isoformat() if self.date else None),
            ("Session", self.session.value if self.session else None),
            (
                "Date Range",
                f"{self.from_date.isoformat()} to {self.to_date.isoformat()}"
                if self.from_date and self.to_date else None,
            ),
            ("Department", self.department),
            ("Batch", self.batch),
            ("Semester", self.semester),
        ]
        return [(label, value) for label, value in fields if value]


class TableView(BaseSchema):
    """Screen-ready table: header labels and string cells."""

    headers: List[str]
    rows: List[List[str]] = Field(default_factory=list)
