import asyncio
import logging
from datetime import date
from typing import Dict, List, Optional

import httpx
import pytest

from attendance_engine.repositories import (
    AttendanceRecordRepository,
    RosterRepository,
    create_store_client,
)
from attendance_engine.services.attendance import (
    AttendanceQueryService,
    AttendanceReportService,
    FilterStateMachine,
    ReportRenderer,
)
from attendance_engine.services.cache import RosterCache
from attendance_engine.services.roster import RosterService

FACULTY_ID = "F001"
TODAY = date(2024, 3, 15)
DAY = date(2024, 3, 14)
EARLIER_DAY = date(2024, 3, 13)
EMPTY_DAY = date(2024, 3, 10)
STORE_URL = "http://stores.test/api"


def student(student_id, name, roll, department="CSE", batch="2021", semester="5"):
    return {
        "studentId": student_id,
        "name": name,
        "rollNumber": roll,
        "department": department,
        "batch": batch,
        "semester": semester,
    }


def day_record(student_id, session, status, on_date=DAY, department="CSE", batch="2021", semester="5", name=None):
    return {
        "id": f"{student_id}-{on_date}-{session}",
        "date": on_date.isoformat(),
        "courseId": "C1",
        "courseName": "Data Structures",
        "facultyId": FACULTY_ID,
        "session": session,
        "studentId": student_id,
        "studentName": name or f"Student {student_id}",
        "rollNumber": f"21CS{student_id[1:].zfill(3)}",
        "department": department,
        "batch": batch,
        "semester": semester,
        "status": status,
    }


def summary_row(student_id, session, present, total, department="CSE", batch="2021", semester="5"):
    return {
        "session": session,
        "studentId": student_id,
        "courseId": "C1",
        "courseName": "Data Structures",
        "studentName": f"Student {student_id}",
        "department": department,
        "batch": batch,
        "semester": semester,
        "presentCount": present,
        "totalDays": total,
    }


class FakeStore:
    """
    In-memory roster and attendance store served through httpx.MockTransport.

    `gates` maps a URL substring to an asyncio.Event; matching requests wait
    for the event before answering.
    """

    def __init__(self):
        self.courses: Dict[str, list] = {
            FACULTY_ID: [
                {"courseId": "C1", "courseName": "Data Structures"},
                {"courseId": "C2", "courseName": "Operating Systems"},
                {"courseId": "C1", "courseName": "Data Structures"},
            ],
        }
        self.rosters: Dict[tuple, list] = {
            (FACULTY_ID, "C1"): [
                student("S1", "Asha", "21CS001"),
                student("S2", "Bala", "21CS002"),
                student("S3", "Chitra", "22EC003", department="ECE", batch="2022", semester="3"),
                student("S1", "Asha", "21CS001"),
            ],
            (FACULTY_ID, "C2"): [
                student("S4", "Deepak", "21ME004", department="MECH", batch="2020", semester="7"),
            ],
        }
        self.day_records: Dict[tuple, list] = {
            ("C1", DAY.isoformat()): [
                day_record("S1", "FN", "present"),
                day_record("S2", "fn", "absent"),
                day_record("S3", "FN", 1, department="ECE", batch="2022", semester="3"),
                day_record("S1", "AN", "present"),
                day_record("S2", "noon", 1),
            ],
            ("C1", EARLIER_DAY.isoformat()): [
                day_record("S1", "FN", 0, on_date=EARLIER_DAY),
            ],
        }
        self.range_rows: Dict[str, list] = {
            "C1": [
                summary_row("S1", "FN", 8, 10),
                summary_row("S2", "FN", 5, 10),
                summary_row("S1", "AN", 9, 10),
                summary_row("S2", "AN", 6, 10),
                summary_row("S3", "FN", 7, 10, department="ECE", batch="2022", semester="3"),
            ],
        }
        self.requests: List[httpx.Request] = []
        self.fail_with: Optional[int] = None
        self.gates: Dict[str, asyncio.Event] = {}

    def requests_to(self, fragment: str) -> List[httpx.Request]:
        return [r for r in self.requests if fragment in str(r.url)]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for fragment, gate in self.gates.items():
            if fragment in str(request.url):
                await gate.wait()

        if self.fail_with:
            return httpx.Response(self.fail_with, json={"message": "unavailable"})

        parts = request.url.path.strip("/").split("/")[1:]
        params = request.url.params

        if parts[:2] == ["roster", "faculty"]:
            faculty_id = parts[2]
            if len(parts) == 3:
                if faculty_id not in self.courses:
                    return httpx.Response(404)
                return httpx.Response(200, json=self.courses[faculty_id])
            rows = self.rosters.get((faculty_id, parts[4]))
            if rows is None:
                return httpx.Response(404)
            return httpx.Response(200, json=rows)

        if parts == ["attendance", "day"]:
            rows = self.day_records.get((params["courseId"], params["date"]), [])
            return httpx.Response(200, json=rows)

        if parts == ["attendance", "range"]:
            return httpx.Response(200, json=self.range_rows.get(params["courseId"], []))

        return httpx.Response(404)


def build_report_service(store: FakeStore, **kwargs) -> AttendanceReportService:
    transport = httpx.MockTransport(store.handler)
    roster = RosterService(RosterRepository(create_store_client(STORE_URL, 5.0, transport=transport)))
    queries = AttendanceQueryService(
        AttendanceRecordRepository(create_store_client(STORE_URL, 5.0, transport=transport))
    )
    kwargs.setdefault("today", lambda: TODAY)
    return AttendanceReportService(
        roster=roster,
        queries=queries,
        renderer=ReportRenderer(institution="KARPAGAM INSTITUTIONS"),
        **kwargs,
    )


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
async def store_client(store):
    client = create_store_client(STORE_URL, 5.0, transport=httpx.MockTransport(store.handler))
    yield client
    await client.aclose()


@pytest.fixture
def roster_cache():
    return RosterCache(default_ttl=300)


@pytest.fixture
def roster_service(store_client, roster_cache):
    return RosterService(RosterRepository(store_client), roster_cache)


@pytest.fixture
def query_service(store_client):
    return AttendanceQueryService(AttendanceRecordRepository(store_client))


@pytest.fixture
def state_machine(roster_service):
    return FilterStateMachine(FACULTY_ID, roster_service, today=lambda: TODAY)


@pytest.fixture
def renderer():
    return ReportRenderer(institution="KARPAGAM INSTITUTIONS")


@pytest.fixture
def report_service(store):
    return build_report_service(store)


@pytest.fixture(autouse=True)
def propagate_engine_logs(monkeypatch):
    """setup_logging() stops propagation at the package logger; caplog listens on root."""
    monkeypatch.setattr(logging.getLogger("attendance_engine"), "propagate", True)
