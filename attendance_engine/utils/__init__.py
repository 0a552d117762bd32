"""
Utility modules for report formatting and document output
"""

from attendance_engine.utils.excel_utils import AttendanceExcelGenerator
from attendance_engine.utils.file_utils import FileHelper
from attendance_engine.utils.formatters import AttendanceFormatter
from attendance_engine.utils.pdf_utils import AttendancePDFGenerator

__all__ = [
    "AttendanceExcelGenerator",
    "AttendanceFormatter",
    "AttendancePDFGenerator",
    "FileHelper",
]
