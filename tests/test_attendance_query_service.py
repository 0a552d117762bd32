from datetime import date

import httpx
import pytest

from attendance_engine.core.exceptions import (
    ErrorCode,
    FilterValidationError,
    QueryNotReadyError,
    RecordStoreError,
)
from attendance_engine.repositories import AttendanceRecordRepository, create_store_client
from attendance_engine.schemas.common.enums import AttendanceStatus, Session
from attendance_engine.services.attendance import AttendanceQueryService

from .conftest import DAY, EMPTY_DAY, FACULTY_ID, STORE_URL


def service_with(handler) -> AttendanceQueryService:
    client = create_store_client(STORE_URL, 5.0, transport=httpx.MockTransport(handler))
    return AttendanceQueryService(AttendanceRecordRepository(client))


class TestQueryDay:
    async def test_returns_parsed_records(self, query_service, store):
        records = await query_service.query_day(FACULTY_ID, "C1", DAY)

        assert len(records) == 5
        assert records[1].session is Session.FN
        assert records[1].status is AttendanceStatus.ABSENT
        assert records[4].session is Session.AN

        params = store.requests[0].url.params
        assert params["facultyId"] == FACULTY_ID
        assert params["courseId"] == "C1"
        assert params["date"] == "2024-03-14"

    async def test_no_records_is_empty_list(self, query_service):
        assert await query_service.query_day(FACULTY_ID, "C1", EMPTY_DAY) == []

    async def test_missing_date_is_not_queried(self, query_service, store):
        with pytest.raises(QueryNotReadyError) as exc_info:
            await query_service.query_day(FACULTY_ID, "C1", None)

        assert exc_info.value.missing == ["date"]
        assert store.requests == []

    async def test_missing_course_is_not_queried(self, query_service, store):
        with pytest.raises(QueryNotReadyError):
            await query_service.query_day(FACULTY_ID, "", DAY)
        assert store.requests == []


class TestQueryRange:
    async def test_returns_summaries(self, query_service, store):
        rows = await query_service.query_range(FACULTY_ID, "C1", date(2024, 3, 1), DAY)

        assert len(rows) == 5
        assert rows[0].percentage == pytest.approx(80.0)
        assert store.requests[0].url.params["fromDate"] == "2024-03-01"
        assert store.requests[0].url.params["toDate"] == "2024-03-14"

    async def test_single_day_range_is_allowed(self, query_service):
        assert await query_service.query_range(FACULTY_ID, "C1", DAY, DAY)

    async def test_inverted_range_rejected(self, query_service, store):
        with pytest.raises(FilterValidationError) as exc_info:
            await query_service.query_range(FACULTY_ID, "C1", DAY, date(2024, 3, 1))

        assert exc_info.value.error_code is ErrorCode.INVALID_DATE_RANGE
        assert store.requests == []

    async def test_missing_bounds(self, query_service):
        with pytest.raises(QueryNotReadyError) as exc_info:
            await query_service.query_range(FACULTY_ID, "C1", None, None)

        assert exc_info.value.missing == ["from_date", "to_date"]


class TestStoreFailures:
    async def test_error_status(self, query_service, store):
        store.fail_with = 502

        with pytest.raises(RecordStoreError) as exc_info:
            await query_service.query_day(FACULTY_ID, "C1", DAY)

        assert exc_info.value.status_code == 502
        assert exc_info.value.details["upstream_status"] == 502

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow store", request=request)

        with pytest.raises(RecordStoreError) as exc_info:
            await service_with(handler).query_day(FACULTY_ID, "C1", DAY)

        assert exc_info.value.error_code is ErrorCode.TIMEOUT_ERROR

    async def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(RecordStoreError) as exc_info:
            await service_with(handler).query_range(FACULTY_ID, "C1", DAY, DAY)

        assert exc_info.value.error_code is ErrorCode.EXTERNAL_SERVICE_ERROR

    async def test_non_list_payload(self):
        def handler(request):
            return httpx.Response(200, json={"rows": []})

        with pytest.raises(RecordStoreError):
            await service_with(handler).query_day(FACULTY_ID, "C1", DAY)

    async def test_no_content_is_empty(self):
        def handler(request):
            return httpx.Response(204)

        assert await service_with(handler).query_day(FACULTY_ID, "C1", DAY) == []

    async def test_malformed_row(self):
        def handler(request):
            return httpx.Response(200, json=[{"studentId": "S1", "session": "evening", "date": "2024-03-14"}])

        with pytest.raises(RecordStoreError):
            await service_with(handler).query_day(FACULTY_ID, "C1", DAY)
