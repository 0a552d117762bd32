"""
Attendance filter schemas.

A `FilterContext` holds the selected query constraints for one query mode
together with the option sets derived from the selected course's roster.
"""

from datetime import date as Date
from typing import List, Optional, Tuple, Union

from pydantic import Field, model_validator

from attendance_engine.schemas.attendance.attendance_report import ReportMeta
from attendance_engine.schemas.common.base import BaseFilterSchema
from attendance_engine.schemas.common.enums import QueryMode
from attendance_engine.schemas.roster.roster import OptionSets

__all__ = [
    "FilterContext",
    "QueryKey",
    "CASCADING_FIELDS",
    "DATE_FIELDS",
]

# Filters whose valid values depend on the selected course's roster.
CASCADING_FIELDS = ("department", "batch", "semester")

DATE_FIELDS = {
    QueryMode.SINGLE: ("date",),
    QueryMode.RANGE: ("from_date", "to_date"),
}

# (mode, faculty_id, course_id, date_1[, date_2])
QueryKey = Tuple


class FilterContext(BaseFilterSchema):
    """Selected constraints for one query mode."""

    mode: QueryMode
    course_id: Union[str, None] = None
    course_name: Union[str, None] = None
    department: Union[str, None] = None
    batch: Union[str, None] = None
    semester: Union[str, None] = None
    date: Union[Date, None] = Field(None, description="Single-day mode date")
    from_date: Union[Date, None] = Field(None, description="Range start (inclusive)")
    to_date: Union[Date, None] = Field(None, description="Range end (inclusive)")
    options: OptionSets = Field(default_factory=OptionSets)

    @model_validator(mode="after")
    def validate_date_range(self):
        """Validate to_date is after or equal to from_date."""
        if (
            self.to_date is not None
            and self.from_date is not None
            and self.to_date < self.from_date
        ):
            raise ValueError("to_date must be after or equal to from_date")
        return self

    @property
    def has_course(self) -> bool:
        return bool(self.course_id)

    def missing_fields(self) -> List[str]:
        """Required fields for this mode's query that are still empty."""
        required = ("course_id",) + DATE_FIELDS[self.mode]
        return [name for name in required if not getattr(self, name)]

    def is_ready(self) -> bool:
        return not self.missing_fields()

    def query_key(self, faculty_id: str) -> Optional[QueryKey]:
        """Identity of the store query this context needs, or None if not ready."""
        if not self.is_ready():
            return None
        dates = tuple(getattr(self, name) for name in DATE_FIELDS[self.mode])
        return (self.mode, faculty_id, self.course_id) + dates

    def report_meta(self, **extra) -> ReportMeta:
        meta = ReportMeta(
            course_name=self.course_name or self.course_id,
            department=self.department,
            batch=self.batch,
            semester=self.semester,
        )
        if self.mode is QueryMode.SINGLE:
            meta.date = self.date
        else:
            meta.from_date = self.from_date
            meta.to_date = self.to_date
        return meta.model_copy(update=extra)
