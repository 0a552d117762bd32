"""
Attendance report endpoints.

All routes act on behalf of the faculty member named in the X-Faculty-Id
header and only ever see that faculty's courses and students.
"""

from datetime import date
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse, Response

from attendance_engine.api.deps import get_faculty_id, get_report_service
from attendance_engine.schemas.common.enums import ExportFormat, Session, StatusFilter
from attendance_engine.services.attendance import AttendanceReportService, ExportedDocument
from attendance_engine.services.base import ServiceResult

router = APIRouter(prefix="/attendance-reports", tags=["Attendance Reports"])


def _dump(value: Any) -> Any:
    if hasattr(value, "model_dump"):
        return value.model_dump(by_alias=True, mode="json")
    if isinstance(value, list):
        return [_dump(v) for v in value]
    return value


def _error_response(result: ServiceResult) -> JSONResponse:
    error = result.error
    status_code = error.status_code if error else 500
    return JSONResponse(
        status_code=status_code,
        content={"error": error.to_dict() if error else {"message": result.message}},
    )


def _document_response(document: ExportedDocument) -> Response:
    return Response(
        content=document.content,
        media_type=document.media_type,
        headers={"Content-Disposition": f'attachment; filename="{document.filename}"'},
    )


@router.get("/courses")
async def list_courses(
    refresh: bool = Query(False, description="Reload the course list from the roster store"),
    faculty_id: str = Depends(get_faculty_id),
    service: AttendanceReportService = Depends(get_report_service),
):
    result = await service.list_courses(faculty_id, refresh=refresh)
    if not result:
        return _error_response(result)
    return {"data": _dump(result.data), "empty": result.is_empty}


@router.get("/courses/{course_id}/options")
async def course_options(
    course_id: str,
    faculty_id: str = Depends(get_faculty_id),
    service: AttendanceReportService = Depends(get_report_service),
):
    result = await service.course_options(faculty_id, course_id)
    if not result:
        return _error_response(result)
    return {"data": _dump(result.data), "courseName": result.metadata["course_name"]}


@router.get("/day")
async def day_report(
    course_id: Optional[str] = Query(None, alias="courseId"),
    on_date: Optional[date] = Query(None, alias="date"),
    department: Optional[str] = Query(None),
    batch: Optional[str] = Query(None),
    semester: Optional[str] = Query(None),
    status: StatusFilter = Query(StatusFilter.ALL),
    faculty_id: str = Depends(get_faculty_id),
    service: AttendanceReportService = Depends(get_report_service),
):
    result = await service.day_report(
        faculty_id, course_id, on_date, department, batch, semester, status
    )
    if not result:
        return _error_response(result)

    partition = result.data
    sessions: Dict[str, Any] = {}
    for session_partition in partition.sessions:
        sessions[session_partition.session.value] = {
            "total": session_partition.total,
            "present": session_partition.present,
            "absent": session_partition.absent,
            "records": _dump(session_partition.records),
            "table": _dump(service.renderer.day_table(session_partition.records)),
        }
    return {"data": {"sessions": sessions, "summary": partition.summary()}, "empty": result.is_empty}


@router.get("/day/export")
async def export_day(
    course_id: Optional[str] = Query(None, alias="courseId"),
    on_date: Optional[date] = Query(None, alias="date"),
    session: Optional[Session] = Query(None, description="FN or AN; both sessions when omitted"),
    department: Optional[str] = Query(None),
    batch: Optional[str] = Query(None),
    semester: Optional[str] = Query(None),
    status: StatusFilter = Query(StatusFilter.ALL),
    faculty_id: str = Depends(get_faculty_id),
    service: AttendanceReportService = Depends(get_report_service),
):
    result = await service.export_day_document(
        faculty_id, course_id, on_date, session, department, batch, semester, status
    )
    if not result:
        return _error_response(result)
    return _document_response(result.data)


@router.get("/range")
async def range_report(
    course_id: Optional[str] = Query(None, alias="courseId"),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    department: Optional[str] = Query(None),
    batch: Optional[str] = Query(None),
    semester: Optional[str] = Query(None),
    faculty_id: str = Depends(get_faculty_id),
    service: AttendanceReportService = Depends(get_report_service),
):
    result = await service.range_report(
        faculty_id, course_id, from_date, to_date, department, batch, semester
    )
    if not result:
        return _error_response(result)
    return {
        "data": _dump(result.data),
        "table": _dump(service.renderer.range_table(result.data)),
        "bands": [service.renderer.band(row.percentage).value for row in result.data],
        "empty": result.is_empty,
    }


@router.get("/range/export")
async def export_range(
    course_id: Optional[str] = Query(None, alias="courseId"),
    from_date: Optional[date] = Query(None, alias="fromDate"),
    to_date: Optional[date] = Query(None, alias="toDate"),
    export_format: ExportFormat = Query(ExportFormat.PDF, alias="format"),
    department: Optional[str] = Query(None),
    batch: Optional[str] = Query(None),
    semester: Optional[str] = Query(None),
    faculty_id: str = Depends(get_faculty_id),
    service: AttendanceReportService = Depends(get_report_service),
):
    result = await service.export_range_document(
        faculty_id, course_id, from_date, to_date, export_format, department, batch, semester
    )
    if not result:
        return _error_response(result)
    return _document_response(result.data)
