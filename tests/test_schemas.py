from datetime import date

import pytest
from pydantic import ValidationError as PydanticValidationError

from attendance_engine.schemas.attendance import (
    AttendanceRecord,
    ConsolidatedRangeAttendance,
    FilterContext,
    ReportMeta,
    SessionAttendanceSummary,
    SessionPartition,
)
from attendance_engine.schemas.common.enums import AttendanceStatus, QueryMode, Session
from attendance_engine.schemas.roster import OptionSets, StudentDetails


class TestEnums:
    @pytest.mark.parametrize("raw", ["FN", "fn", " Fn ", "morning", "forenoon"])
    def test_forenoon_spellings(self, raw):
        assert Session.parse(raw) is Session.FN

    @pytest.mark.parametrize("raw", ["AN", "an", "noon", "afternoon"])
    def test_afternoon_spellings(self, raw):
        assert Session.parse(raw) is Session.AN

    def test_unknown_session(self):
        with pytest.raises(ValueError):
            Session.parse("evening")

    @pytest.mark.parametrize(
        "raw,expected",
        [
            (1, AttendanceStatus.PRESENT),
            (0, AttendanceStatus.ABSENT),
            ("Present", AttendanceStatus.PRESENT),
            ("ABSENT", AttendanceStatus.ABSENT),
            (True, AttendanceStatus.PRESENT),
        ],
    )
    def test_status_encodings(self, raw, expected):
        assert AttendanceStatus.parse(raw) is expected

    def test_invalid_status(self):
        with pytest.raises(ValueError):
            AttendanceStatus.parse(2)


class TestRecords:
    def test_legacy_wire_names(self):
        record = AttendanceRecord.model_validate({
            "dates": "2024-03-14",
            "session": "morning",
            "stdId": 101,
            "stdName": "Asha",
            "rollNum": "21CS001",
            "deptName": "CSE",
            "batch": "2021",
            "sem": 5,
            "status": 1,
        })

        assert record.date == date(2024, 3, 14)
        assert record.session is Session.FN
        assert record.student_id == "101"
        assert record.semester == "5"
        assert record.is_present
        assert record.display_roll == "21CS001"

    def test_roll_number_falls_back_to_student_id(self):
        record = AttendanceRecord(date=date(2024, 3, 14), session="AN", student_id="S9", status="absent")
        assert record.display_roll == "S9"

    def test_records_are_immutable(self):
        record = AttendanceRecord(date=date(2024, 3, 14), session="AN", student_id="S9", status="absent")
        with pytest.raises(PydanticValidationError):
            record.status = AttendanceStatus.PRESENT

    def test_summary_percentage_derived_when_missing(self):
        summary = SessionAttendanceSummary.model_validate(
            {"session": "FN", "stdId": "S1", "presentcount": 8, "totaldays": 10}
        )
        assert summary.percentage == pytest.approx(80.0)

    def test_summary_percentage_zero_when_nothing_conducted(self):
        summary = SessionAttendanceSummary.model_validate(
            {"session": "FN", "studentId": "S1", "presentCount": 0, "totalDays": 0, "percentage": None}
        )
        assert summary.percentage == 0.0

    def test_summary_rejects_negative_counts(self):
        with pytest.raises(PydanticValidationError):
            SessionAttendanceSummary.model_validate(
                {"session": "FN", "studentId": "S1", "presentCount": -1, "totalDays": 4}
            )

    def test_partition_counts_must_add_up(self):
        with pytest.raises(PydanticValidationError):
            SessionPartition(session=Session.FN, total=3, present=1, absent=1)

    def test_consolidated_row_serializes_camel_case(self):
        row = ConsolidatedRangeAttendance(student_id="S1", total_conducted=20, total_attended=17, percentage=85.0)
        dumped = row.model_dump(by_alias=True)

        assert dumped["totalConducted"] == 20


class TestOptionSets:
    def test_distinct_values_in_first_seen_order(self):
        roster = [
            StudentDetails(student_id="S1", department="CSE", batch="2021", semester="5"),
            StudentDetails(student_id="S2", department="ECE", batch="2021", semester="3"),
            StudentDetails(student_id="S3", department="CSE", batch="2020", semester=""),
        ]
        options = OptionSets.from_roster(roster)

        assert options.departments == ["CSE", "ECE"]
        assert options.batches == ["2021", "2020"]
        assert options.semesters == ["5", "3"]
        assert options.allowed_values("department") == ["CSE", "ECE"]


class TestFilterContext:
    def test_single_mode_requires_course_and_date(self):
        context = FilterContext(mode=QueryMode.SINGLE, course_id="C1")

        assert context.missing_fields() == ["date"]
        assert context.query_key("F001") is None

        context.date = date(2024, 3, 14)
        assert context.query_key("F001") == (QueryMode.SINGLE, "F001", "C1", date(2024, 3, 14))

    def test_range_mode_requires_both_bounds(self):
        context = FilterContext(mode=QueryMode.RANGE, course_id="C1", from_date=date(2024, 3, 1))
        assert context.missing_fields() == ["to_date"]
        assert not context.is_ready()

    def test_inverted_range_rejected(self):
        with pytest.raises(PydanticValidationError):
            FilterContext(
                mode=QueryMode.RANGE,
                from_date=date(2024, 3, 10),
                to_date=date(2024, 3, 1),
            )

    def test_report_meta_only_lists_set_fields(self):
        context = FilterContext(
            mode=QueryMode.RANGE,
            course_id="C1",
            course_name="Data Structures",
            batch="2021",
            from_date=date(2024, 3, 1),
            to_date=date(2024, 3, 10),
        )
        meta = context.report_meta(title="Summary")

        assert isinstance(meta, ReportMeta)
        assert meta.title == "Summary"
        assert meta.header_fields() == [
            ("Course", "Data Structures"),
            ("Date Range", "2024-03-01 to 2024-03-10"),
            ("Batch", "2021"),
        ]
