"""
Shared FastAPI dependencies: the faculty identity header and the report
service wired to the upstream stores.
"""

from functools import lru_cache
from typing import List

import httpx
from fastapi import Header

from attendance_engine.config.settings import get_settings
from attendance_engine.repositories import (
    AttendanceRecordRepository,
    RosterRepository,
    create_store_client,
)
from attendance_engine.services.attendance import (
    AttendanceQueryService,
    AttendanceReportService,
    ReportRenderer,
)
from attendance_engine.services.cache import RosterCache
from attendance_engine.services.roster import RosterService

_clients: List[httpx.AsyncClient] = []


def get_faculty_id(
    x_faculty_id: str = Header(..., alias="X-Faculty-Id", min_length=1),
) -> str:
    """Faculty identity, authenticated by the gateway in front of this service."""
    return x_faculty_id.strip()


@lru_cache()
def get_report_service() -> AttendanceReportService:
    """Process-wide report service; the roster cache lives as long as it does."""
    config = get_settings()

    roster_client = create_store_client(config.ROSTER_SERVICE_URL, config.HTTP_TIMEOUT_SECONDS)
    attendance_client = create_store_client(config.ATTENDANCE_SERVICE_URL, config.HTTP_TIMEOUT_SECONDS)
    _clients.extend([roster_client, attendance_client])

    return AttendanceReportService(
        roster=RosterService(
            RosterRepository(roster_client),
            RosterCache(default_ttl=config.ROSTER_CACHE_TTL_SECONDS),
        ),
        queries=AttendanceQueryService(AttendanceRecordRepository(attendance_client)),
        renderer=ReportRenderer(
            institution=config.INSTITUTION_NAME,
            good_threshold=config.ATTENDANCE_GOOD_THRESHOLD,
            warning_threshold=config.ATTENDANCE_WARNING_THRESHOLD,
        ),
        export_dir=config.EXPORT_DIR,
        max_range_days=config.MAX_REPORT_RANGE_DAYS,
    )


async def close_clients() -> None:
    """Close the upstream HTTP clients and drop the cached service."""
    while _clients:
        await _clients.pop().aclose()
    get_report_service.cache_clear()


__all__ = [
    "get_faculty_id",
    "get_report_service",
    "close_clients",
]
