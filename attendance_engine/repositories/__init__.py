from attendance_engine.repositories.attendance import AttendanceRecordRepository
from attendance_engine.repositories.base_repository import BaseStoreRepository, create_store_client
from attendance_engine.repositories.roster import RosterRepository

__all__ = [
    "AttendanceRecordRepository",
    "BaseStoreRepository",
    "RosterRepository",
    "create_store_client",
]
