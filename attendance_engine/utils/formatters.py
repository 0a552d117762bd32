"""
Data formatting utilities for attendance reports
"""

import math
from typing import Optional, Union

from attendance_engine.schemas.common.enums import AttendanceStatus


class AttendanceFormatter:
    """Cell formatting shared by screen tables and exported documents"""

    @classmethod
    def format_percentage(cls, value: Optional[Union[int, float]], decimal_places: int = 1) -> str:
        """Format percentage value; NaN, infinite or missing values print as zero"""
        if value is None or not math.isfinite(value):
            value = 0.0
        return f"{value:.{decimal_places}f}%"

    @classmethod
    def format_ratio(cls, present: int, total: int) -> str:
        """Present over total, e.g. 8/10"""
        return f"{present}/{total}"

    @classmethod
    def format_status(cls, status: AttendanceStatus) -> str:
        """Capitalized status label"""
        return AttendanceStatus(status).value.capitalize()
