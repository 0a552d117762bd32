import pytest

from attendance_engine.core.exceptions import ErrorCode, RecordStoreError
from attendance_engine.services.cache import RosterCache

from .conftest import FACULTY_ID


class TestResolveCourses:
    async def test_courses_are_deduplicated_in_order(self, roster_service):
        courses = await roster_service.resolve_courses(FACULTY_ID)

        assert [c.course_id for c in courses] == ["C1", "C2"]
        assert courses[0].display_name == "Data Structures"

    async def test_unknown_faculty_has_no_courses(self, roster_service):
        assert await roster_service.resolve_courses("NOBODY") == []

    async def test_empty_faculty_id(self, roster_service, store):
        assert await roster_service.resolve_courses("") == []
        assert store.requests == []

    async def test_course_list_is_cached(self, roster_service, store):
        await roster_service.resolve_courses(FACULTY_ID)
        await roster_service.resolve_courses(FACULTY_ID)

        assert len(store.requests) == 1

    async def test_refresh_invalidates_the_faculty(self, roster_service, roster_cache, store):
        await roster_service.resolve_courses(FACULTY_ID)
        await roster_service.resolve_roster(FACULTY_ID, "C1")
        store.courses[FACULTY_ID] = [{"courseId": "C9", "courseName": "Compilers"}]

        courses = await roster_service.resolve_courses(FACULTY_ID, refresh=True)

        assert [c.course_id for c in courses] == ["C9"]
        assert roster_cache.get(FACULTY_ID, "C1") is None

    async def test_find_course(self, roster_service):
        assert (await roster_service.find_course(FACULTY_ID, "C2")).course_name == "Operating Systems"
        assert await roster_service.find_course(FACULTY_ID, "C404") is None

    async def test_store_failure_is_raised(self, roster_service, store):
        store.fail_with = 503

        with pytest.raises(RecordStoreError) as exc_info:
            await roster_service.resolve_courses(FACULTY_ID)

        assert exc_info.value.upstream_status == 503
        assert exc_info.value.error_code is ErrorCode.EXTERNAL_SERVICE_ERROR


class TestResolveRoster:
    async def test_students_are_deduplicated(self, roster_service):
        roster = await roster_service.resolve_roster(FACULTY_ID, "C1")

        assert [s.student_id for s in roster] == ["S1", "S2", "S3"]

    async def test_roster_is_scoped_to_the_course(self, roster_service):
        roster = await roster_service.resolve_roster(FACULTY_ID, "C2")
        assert [s.student_id for s in roster] == ["S4"]

    async def test_unassigned_course_is_empty(self, roster_service):
        assert await roster_service.resolve_roster(FACULTY_ID, "C404") == []

    async def test_option_sets(self, roster_service):
        options = await roster_service.option_sets(FACULTY_ID, "C1")

        assert options.departments == ["CSE", "ECE"]
        assert options.batches == ["2021", "2022"]
        assert options.semesters == ["5", "3"]

    async def test_malformed_rows_are_store_errors(self, roster_service, store):
        store.rosters[(FACULTY_ID, "C1")] = [{"name": "no id"}]

        with pytest.raises(RecordStoreError):
            await roster_service.resolve_roster(FACULTY_ID, "C1")


class TestRosterCache:
    def test_entries_expire(self):
        now = [100.0]
        cache = RosterCache(default_ttl=10, clock=lambda: now[0])
        cache.set("F1", "C1", ["S1"])

        assert cache.get("F1", "C1") == ["S1"]
        now[0] = 110.0
        assert cache.get("F1", "C1") is None
        assert len(cache) == 0

    def test_zero_ttl_disables_caching(self):
        cache = RosterCache(default_ttl=0, clock=lambda: 100.0)
        cache.set("F1", "C1", ["S1"])

        assert cache.get("F1", "C1") is None
        assert len(cache) == 0

    def test_no_ttl_never_expires(self):
        now = [100.0]
        cache = RosterCache(default_ttl=None, clock=lambda: now[0])
        cache.set("F1", "C1", ["S1"])

        now[0] = 1_000_000.0
        assert cache.get("F1", "C1") == ["S1"]

    def test_invalidation(self):
        cache = RosterCache(default_ttl=None)
        cache.set("F1", None, ["C1"])
        cache.set("F1", "C1", ["S1"])
        cache.set("F2", "C1", ["S2"])

        assert cache.invalidate("F1", None)
        assert not cache.invalidate("F1", None)
        assert cache.invalidate_faculty("F1") == 1
        assert cache.get("F2", "C1") == ["S2"]
        assert cache.clear() == 1
