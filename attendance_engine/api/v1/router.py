"""
API v1 Router - Main Entry Point
Aggregates all v1 API endpoints for the attendance reporting engine
"""
from fastapi import APIRouter

from attendance_engine.api.v1 import attendance_reports

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        404: {"description": "Not Found"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
        502: {"description": "Upstream Store Error"},
    }
)

router.include_router(attendance_reports.router)
