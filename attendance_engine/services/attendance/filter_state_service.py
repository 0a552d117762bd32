"""
Filter state for the two query modes.

Each mode owns an isolated FilterContext. Selecting a course recomputes the
batch/department/semester options from that course's roster and clears any
previously chosen cascading filters. Every change is published to
subscribers as a FilterChangeEvent.
"""

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Union

from attendance_engine.core.exceptions import ErrorCode, FilterValidationError
from attendance_engine.schemas.attendance.attendance_filters import (
    CASCADING_FIELDS,
    DATE_FIELDS,
    FilterContext,
)
from attendance_engine.schemas.common.enums import QueryMode
from attendance_engine.schemas.roster.roster import OptionSets
from attendance_engine.services.roster.roster_service import RosterService

logger = logging.getLogger(__name__)


class ChangeKind(str, Enum):
    COURSE = "course"
    OPTIONS = "options"
    FILTER = "filter"
    RESET = "reset"
    MODE = "mode"


@dataclass(frozen=True)
class FilterChangeEvent:
    """
    Published after every state change.

    `context` is a snapshot taken when the event was emitted; `generation`
    is the mode's mutation counter at that moment.
    """

    mode: QueryMode
    kind: ChangeKind
    context: FilterContext
    generation: int
    field: Optional[str] = None
    previous_mode: Optional[QueryMode] = None


Listener = Callable[[FilterChangeEvent], None]


class FilterStateMachine:
    """
    Interaction state for one faculty member's report screen.

    Modes never share values: a mutation of the single-day context leaves the
    range context untouched and vice versa.
    """

    def __init__(
        self,
        faculty_id: str,
        roster: RosterService,
        today: Callable[[], date] = date.today,
    ):
        self.faculty_id = faculty_id
        self.roster = roster
        self._today = today
        self._contexts: Dict[QueryMode, FilterContext] = {m: FilterContext(mode=m) for m in QueryMode}
        self._generations: Dict[QueryMode, int] = {m: 0 for m in QueryMode}
        self._course_requests: Dict[QueryMode, int] = {m: 0 for m in QueryMode}
        self._listeners: List[Listener] = []
        self.active_mode = QueryMode.SINGLE

    # ------------------------------------------------------------------ #
    # Observation
    # ------------------------------------------------------------------ #
    def context(self, mode: Union[QueryMode, str]) -> FilterContext:
        """Snapshot of a mode's context; mutating it has no effect."""
        return self._contexts[QueryMode(mode)].model_copy(deep=True)

    def generation(self, mode: Union[QueryMode, str]) -> int:
        return self._generations[QueryMode(mode)]

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def switch_mode(self, mode: Union[QueryMode, str]) -> None:
        mode = QueryMode(mode)
        if mode is self.active_mode:
            return
        previous, self.active_mode = self.active_mode, mode
        logger.debug(f"switch_mode: {previous.value} -> {mode.value}")
        self._emit(mode, ChangeKind.MODE, previous_mode=previous)

    async def select_course(self, mode: Union[QueryMode, str], course_id: Optional[str]) -> FilterContext:
        """
        Select a course for a mode.

        Clears department/batch/semester and the option sets, then derives new
        options from the course's roster. A later selection supersedes an
        earlier one still waiting on the roster store.

        Raises:
            FilterValidationError: the course is not assigned to this faculty
            RecordStoreError: the roster store failed
        """
        mode = QueryMode(mode)
        self._course_requests[mode] += 1
        request = self._course_requests[mode]

        if not course_id:
            self._replace_course(mode, None, None)
            return self.context(mode)

        course = await self.roster.find_course(self.faculty_id, course_id)
        if request != self._course_requests[mode]:
            logger.debug(f"select_course: superseded selection of {course_id} ({mode.value})")
            return self.context(mode)
        if course is None:
            raise FilterValidationError(
                f"Course {course_id} is not assigned to faculty {self.faculty_id}",
                field="course_id",
                value=course_id,
            )

        self._replace_course(mode, course.course_id, course.display_name)

        roster = await self.roster.resolve_roster(self.faculty_id, course.course_id)
        if request != self._course_requests[mode]:
            logger.debug(f"select_course: discarded roster for {course_id} ({mode.value})")
            return self.context(mode)

        self._contexts[mode].options = OptionSets.from_roster(roster)
        self._emit(mode, ChangeKind.OPTIONS, field="options")
        return self.context(mode)

    def select_filter(self, mode: Union[QueryMode, str], field: str, value: Any) -> bool:
        """
        Set one non-course filter.

        Returns False without changing anything while no course is selected
        or when the value is unchanged.

        Raises:
            FilterValidationError: unknown field, value outside the option
                set, future date, or an inverted date range
        """
        mode = QueryMode(mode)
        ctx = self._contexts[mode]
        allowed_fields = CASCADING_FIELDS + DATE_FIELDS[mode]
        if field not in allowed_fields:
            raise FilterValidationError(
                f"'{field}' is not a {mode.value} mode filter",
                field=field,
                value=value,
                allowed=list(allowed_fields),
            )

        if not ctx.has_course:
            logger.debug(f"select_filter: ignored {field} for {mode.value}, no course selected")
            return False

        if value in ("", None):
            value = None
        elif field in CASCADING_FIELDS:
            value = self._validate_option(ctx, field, value)
        else:
            value = self._validate_date(ctx, field, value)

        if getattr(ctx, field) == value:
            return False

        setattr(ctx, field, value)
        self._generations[mode] += 1
        self._emit(mode, ChangeKind.FILTER, field=field)
        return True

    def reset(self, mode: Union[QueryMode, str]) -> None:
        """Clear the whole context of a mode."""
        mode = QueryMode(mode)
        self._course_requests[mode] += 1
        self._contexts[mode] = FilterContext(mode=mode)
        self._generations[mode] += 1
        self._emit(mode, ChangeKind.RESET)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #
    def _replace_course(self, mode: QueryMode, course_id: Optional[str], course_name: Optional[str]) -> None:
        previous = self._contexts[mode]
        self._contexts[mode] = FilterContext(
            mode=mode,
            course_id=course_id,
            course_name=course_name,
            date=previous.date,
            from_date=previous.from_date,
            to_date=previous.to_date,
        )
        self._generations[mode] += 1
        self._emit(mode, ChangeKind.COURSE, field="course_id")

    @staticmethod
    def _validate_option(ctx: FilterContext, field: str, value: Any) -> str:
        value = str(value).strip()
        allowed = ctx.options.allowed_values(field)
        if value not in allowed:
            raise FilterValidationError(
                f"{field} '{value}' is not available for course {ctx.course_id}",
                field=field,
                value=value,
                allowed=allowed,
            )
        return value

    def _validate_date(self, ctx: FilterContext, field: str, value: Any) -> date:
        if isinstance(value, str):
            try:
                value = date.fromisoformat(value.strip())
            except ValueError:
                raise FilterValidationError(f"{field} must be an ISO date", field=field, value=value)
        if not isinstance(value, date):
            raise FilterValidationError(f"{field} must be a date", field=field, value=value)

        today = self._today()
        if value > today:
            raise FilterValidationError(
                f"{field} cannot be in the future",
                field=field,
                value=value,
                error_code=ErrorCode.INVALID_DATE_RANGE,
            )
        if field == "from_date" and ctx.to_date and value > ctx.to_date:
            raise FilterValidationError(
                "from_date must be before or equal to to_date",
                field=field,
                value=value,
                error_code=ErrorCode.INVALID_DATE_RANGE,
            )
        if field == "to_date" and ctx.from_date and value < ctx.from_date:
            raise FilterValidationError(
                "to_date must be after or equal to from_date",
                field=field,
                value=value,
                error_code=ErrorCode.INVALID_DATE_RANGE,
            )
        return value

    def _emit(
        self,
        mode: QueryMode,
        kind: ChangeKind,
        field: Optional[str] = None,
        previous_mode: Optional[QueryMode] = None,
    ) -> None:
        event = FilterChangeEvent(
            mode=mode,
            kind=kind,
            context=self.context(mode),
            generation=self._generations[mode],
            field=field,
            previous_mode=previous_mode,
        )
        for listener in list(self._listeners):
            listener(event)
