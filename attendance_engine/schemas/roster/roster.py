"""
Roster schemas: courses a faculty member may query and the students
assigned to them per course.
"""

from typing import List, Union

from pydantic import Field

from attendance_engine.schemas.common.base import BaseSchema, aliases

__all__ = [
    "CourseSummary",
    "StudentDetails",
    "OptionSets",
]


class CourseSummary(BaseSchema):
    """A course assigned to a faculty member."""

    course_id: str = Field(..., min_length=1, validation_alias=aliases("courseId", "course_id", "id"))
    course_name: str = Field(
        "",
        validation_alias=aliases("courseName", "course_name", "courseTitle"),
    )

    @property
    def display_name(self) -> str:
        return self.course_name or self.course_id


class StudentDetails(BaseSchema):
    """A student on a faculty member's roster for one course."""

    student_id: str = Field(..., min_length=1, validation_alias=aliases("studentId", "stdId", "student_id"))
    name: str = Field("", validation_alias=aliases("name", "stdName", "studentName"))
    roll_number: Union[str, None] = Field(
        None,
        validation_alias=aliases("rollNumber", "rollNum", "roll_number"),
    )
    department: str = Field("", validation_alias=aliases("department", "deptName", "program"))
    batch: str = Field("", validation_alias=aliases("batch", "year"))
    semester: str = Field("", validation_alias=aliases("semester", "sem"))


class OptionSets(BaseSchema):
    """Filter options derived from the selected course's roster."""

    batches: List[str] = Field(default_factory=list)
    departments: List[str] = Field(default_factory=list)
    semesters: List[str] = Field(default_factory=list)

    @classmethod
    def from_roster(cls, roster: List[StudentDetails]) -> "OptionSets":
        """Distinct non-empty values in first-seen order."""
        def distinct(values):
            return list(dict.fromkeys(v for v in values if v))

        return cls(
            batches=distinct(s.batch for s in roster),
            departments=distinct(s.department for s in roster),
            semesters=distinct(s.semester for s in roster),
        )

    def allowed_values(self, field: str) -> List[str]:
        return {
            "batch": self.batches,
            "department": self.departments,
            "semester": self.semesters,
        }[field]
