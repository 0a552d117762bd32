import io
from datetime import date

import pytest
from openpyxl import load_workbook

from attendance_engine.core.exceptions import ReportExportError
from attendance_engine.schemas.attendance import (
    AttendanceRecord,
    ReportMeta,
    SessionAttendanceSummary,
)
from attendance_engine.schemas.common.enums import AttendanceBand, ExportFormat, Session
from attendance_engine.services.attendance import consolidate, partition_by_session
from attendance_engine.utils import AttendanceFormatter, FileHelper

from .conftest import DAY, day_record, summary_row


@pytest.fixture
def records():
    return [
        AttendanceRecord.model_validate(day_record("S1", "FN", "present", name="Asha")),
        AttendanceRecord.model_validate(day_record("S2", "FN", "absent", name="Bala")),
        AttendanceRecord.model_validate(day_record("S1", "AN", 1, name="Asha")),
    ]


@pytest.fixture
def consolidated():
    rows = [
        summary_row("S1", "FN", 8, 10),
        summary_row("S2", "FN", 5, 10),
        summary_row("S1", "AN", 9, 10),
        summary_row("S2", "AN", 6, 10),
        summary_row("S3", "FN", 7, 10),
    ]
    return consolidate([SessionAttendanceSummary.model_validate(r) for r in rows])


@pytest.fixture
def range_meta():
    return ReportMeta(
        course_name="Data Structures",
        from_date=date(2024, 3, 1),
        to_date=date(2024, 3, 14),
    )


class TestTables:
    def test_day_table(self, renderer, records):
        table = renderer.day_table(records[:2])

        assert table.headers == ["Roll Number", "Name", "Status"]
        assert table.rows == [
            ["21CS001", "Asha", "Present"],
            ["21CS002", "Bala", "Absent"],
        ]

    def test_range_table(self, renderer, consolidated):
        table = renderer.range_table(consolidated)

        assert table.headers[3:5] == ["FN (P/T)", "AN (P/T)"]
        assert table.rows[0][2:] == ["10", "8/10", "9/10", "20", "17", "85.0%"]

    def test_missing_session_is_dashed(self, renderer, consolidated):
        s3 = renderer.range_table(consolidated).rows[2]

        assert s3[3] == "7/10"
        assert s3[4] == "-/-"
        assert s3[-1] == "70.0%"

    def test_bands(self, renderer, consolidated):
        assert [renderer.band(r.percentage) for r in consolidated] == [
            AttendanceBand.GOOD,
            AttendanceBand.CRITICAL,
            AttendanceBand.WARNING,
        ]


class TestFormatter:
    @pytest.mark.parametrize("value", [None, float("nan"), float("inf")])
    def test_unprintable_percentage(self, value):
        assert AttendanceFormatter.format_percentage(value) == "0.0%"

    def test_percentage_is_rounded_for_display_only(self):
        assert AttendanceFormatter.format_percentage(200 / 3) == "66.7%"


class TestPdf:
    def test_day_export(self, renderer, records):
        meta = ReportMeta(course_name="Data Structures", date=DAY)

        content = renderer.export_day(Session.FN, records, meta)

        assert content.startswith(b"%PDF")

    def test_exports_are_reproducible(self, renderer, consolidated, range_meta):
        first = renderer.export_range(consolidated, range_meta)
        second = renderer.export_range(consolidated, range_meta)

        assert first.startswith(b"%PDF")
        assert first == second

    def test_render_document_accepts_day_partition(self, renderer, records):
        content = renderer.render_document(partition_by_session(records), ReportMeta(date=DAY))
        assert content.startswith(b"%PDF")

    def test_empty_range_still_renders(self, renderer, range_meta):
        assert renderer.export_range([], range_meta).startswith(b"%PDF")


class TestWorkbook:
    def test_headers_and_bands(self, renderer, consolidated, range_meta):
        content = renderer.export_range_workbook(consolidated, range_meta)
        ws = load_workbook(io.BytesIO(content)).active

        assert ws["A1"].value == "Overall Attendance Summary"
        assert ws["A2"].value == "Course: Data Structures"
        assert ws["A3"].value == "Date Range: 2024-03-01 to 2024-03-14"

        headers = [c.value for c in ws[5]]
        assert headers[0] == "Roll No"
        assert headers[-1] == "Attendance %"

        assert ws["H6"].value == "85.0%"
        assert ws["H6"].fill.start_color.rgb.endswith("DCFCE7")
        assert ws["H7"].fill.start_color.rgb.endswith("FEE2E2")
        assert ws["H8"].fill.start_color.rgb.endswith("FEF9C3")


class TestFilenames:
    def test_range(self, renderer, range_meta):
        assert (
            renderer.suggested_filename(range_meta, ExportFormat.XLSX)
            == "overall-attendance-2024-03-01-to-2024-03-14.xlsx"
        )

    def test_day_with_session(self, renderer):
        meta = ReportMeta(date=DAY, session=Session.AN)
        assert renderer.suggested_filename(meta) == "attendance-2024-03-14-AN.pdf"

    def test_day_without_session(self, renderer):
        assert renderer.suggested_filename(ReportMeta(date=DAY)) == "attendance-2024-03-14.pdf"


class TestSaveDocument:
    def test_writes_into_directory(self, tmp_path):
        path = FileHelper.save_document(b"%PDF-1.4", tmp_path / "exports", "attendance-2024-03-14.pdf")

        assert path.read_bytes() == b"%PDF-1.4"
        assert [p.name for p in path.parent.iterdir()] == ["attendance-2024-03-14.pdf"]

    def test_unsafe_characters_are_replaced(self, tmp_path):
        path = FileHelper.save_document(b"x", tmp_path, "a/b:c.pdf")
        assert path.name == "a_b_c.pdf"

    def test_unwritable_target(self, tmp_path):
        blocker = tmp_path / "exports"
        blocker.write_text("not a directory")

        with pytest.raises(ReportExportError) as exc_info:
            FileHelper.save_document(b"x", blocker, "report.pdf")

        assert exc_info.value.details["filename"] == "report.pdf"
