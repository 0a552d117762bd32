from attendance_engine.repositories.attendance.attendance_record_repository import (
    AttendanceRecordRepository,
)

__all__ = ["AttendanceRecordRepository"]
