"""
Attendance input schemas as returned by the attendance record store.

`AttendanceRecord` is one raw single-day event; `SessionAttendanceSummary`
is one pre-aggregated row per student per session over a date range.
"""

from datetime import date as Date
from typing import Any, Union

from pydantic import ConfigDict, Field, field_validator, model_validator

from attendance_engine.schemas.common.base import BaseSchema, aliases
from attendance_engine.schemas.common.enums import AttendanceStatus, Session

__all__ = [
    "AttendanceRecord",
    "SessionAttendanceSummary",
]


class AttendanceRecord(BaseSchema):
    """
    Raw attendance event: one student, one session, one date.

    Records are immutable once created.
    """

    model_config = ConfigDict(frozen=True)

    id: Union[str, None] = Field(None, description="Record identifier")
    date: Date = Field(..., validation_alias=aliases("date", "dates"))
    course_id: Union[str, None] = Field(None, validation_alias=aliases("courseId", "course_id"))
    course_name: str = Field("", validation_alias=aliases("courseName", "course_name"))
    faculty_id: Union[str, None] = Field(None, validation_alias=aliases("facultyId", "faculty_id"))
    session: Session
    student_id: str = Field(..., min_length=1, validation_alias=aliases("studentId", "stdId", "student_id"))
    student_name: str = Field("", validation_alias=aliases("studentName", "stdName", "student_name"))
    roll_number: Union[str, None] = Field(
        None,
        validation_alias=aliases("rollNumber", "rollNum", "roll_number"),
    )
    department: str = Field("", validation_alias=aliases("department", "deptName"))
    batch: str = ""
    semester: str = Field("", validation_alias=aliases("semester", "sem"))
    status: AttendanceStatus

    @field_validator("session", mode="before")
    @classmethod
    def normalize_session(cls, v: Any) -> Session:
        return Session.parse(v)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v: Any) -> AttendanceStatus:
        return AttendanceStatus.parse(v)

    @property
    def is_present(self) -> bool:
        return self.status is AttendanceStatus.PRESENT

    @property
    def display_roll(self) -> str:
        return self.roll_number or self.student_id


class SessionAttendanceSummary(BaseSchema):
    """
    Per-student, per-session attendance totals over a queried range.

    Produced upstream; read-only input to consolidation.
    """

    session: Session
    student_id: str = Field(..., min_length=1, validation_alias=aliases("studentId", "stdId", "student_id"))
    course_id: Union[str, None] = Field(None, validation_alias=aliases("courseId", "course_id"))
    course_name: str = Field("", validation_alias=aliases("courseName", "course_name"))
    student_name: str = Field("", validation_alias=aliases("studentName", "stdName", "student_name"))
    roll_number: Union[str, None] = Field(
        None,
        validation_alias=aliases("rollNumber", "rollNum", "roll_number"),
    )
    department: str = Field("", validation_alias=aliases("department", "deptName"))
    batch: str = ""
    semester: str = Field("", validation_alias=aliases("semester", "sem"))
    present_count: int = Field(
        ...,
        ge=0,
        validation_alias=aliases("presentCount", "presentcount", "present_count"),
    )
    total_days: int = Field(
        ...,
        ge=0,
        validation_alias=aliases("totalDays", "totaldays", "total_days"),
    )
    percentage: float = Field(0.0, ge=0)

    @field_validator("session", mode="before")
    @classmethod
    def normalize_session(cls, v: Any) -> Session:
        return Session.parse(v)

    @model_validator(mode="before")
    @classmethod
    def derive_percentage(cls, data: Any) -> Any:
        """Fill in the percentage when the store omitted it."""
        if not isinstance(data, dict) or data.get("percentage") is not None:
            return data
        present = next((data[k] for k in ("presentCount", "presentcount", "present_count") if k in data), 0)
        total = next((data[k] for k in ("totalDays", "totaldays", "total_days") if k in data), 0)
        try:
            present, total = int(present), int(total)
        except (TypeError, ValueError):
            # leave the field validators to report the bad value
            return data
        data = dict(data)
        data["percentage"] = present / total * 100 if total > 0 else 0.0
        return data
