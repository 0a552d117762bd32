"""
Query dispatcher.

Listens to the filter state machine and keeps one derived result per query
mode in step with it. Requests are issued only for the active mode and only
when the mode's query key changes; a response is applied only if it is
still the latest request for its mode and the context still asks for the
same key. Everything else is discarded as stale.
"""

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Set, Union

from attendance_engine.core.exceptions import QueryNotReadyError
from attendance_engine.schemas.attendance.attendance_filters import FilterContext, QueryKey
from attendance_engine.schemas.attendance.attendance_report import DayPartition
from attendance_engine.schemas.common.enums import QueryMode, QueryStatus
from attendance_engine.services.attendance.attendance_query_service import AttendanceQueryService
from attendance_engine.services.attendance.consolidation_service import (
    apply_record_filters,
    apply_summary_filters,
    consolidate,
    partition_by_session,
)
from attendance_engine.services.attendance.filter_state_service import (
    ChangeKind,
    FilterChangeEvent,
    FilterStateMachine,
)

logger = logging.getLogger(__name__)


@dataclass
class QueryState:
    """
    Derived result of one query mode.

    `raw` holds the store rows of the last applied response; `result` is
    the view derived from them and the current cascading filters (a
    DayPartition in single-day mode, a consolidated list in range mode).
    `key` is the key of the last issued request and `token` its sequence
    number.
    """

    mode: QueryMode
    status: QueryStatus = QueryStatus.IDLE
    raw: Optional[list] = None
    result: Any = None
    error: Optional[Exception] = None
    key: Optional[QueryKey] = None
    token: int = 0

    @property
    def is_loading(self) -> bool:
        return self.status is QueryStatus.LOADING


StateListener = Callable[[QueryState], None]


def _is_empty(result: Any) -> bool:
    if isinstance(result, DayPartition):
        return result.is_empty
    return not result


class QueryDispatcher:
    """
    Drives attendance queries from filter changes.

    Must be used from inside a running event loop; each issued request runs
    as an asyncio task.
    """

    def __init__(
        self,
        filters: FilterStateMachine,
        queries: AttendanceQueryService,
        strict: bool = False,
    ):
        self.filters = filters
        self.queries = queries
        self.strict = strict
        self._states: Dict[QueryMode, QueryState] = {m: QueryState(mode=m) for m in QueryMode}
        self._tasks: Set[asyncio.Task] = set()
        self._listeners: List[StateListener] = []
        self._unsubscribe = filters.subscribe(self.on_filter_change)

    # ------------------------------------------------------------------ #
    # Observation
    # ------------------------------------------------------------------ #
    def state(self, mode: Union[QueryMode, str]) -> QueryState:
        return replace(self._states[QueryMode(mode)])

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait(self) -> None:
        """Wait until no request is in flight."""
        while True:
            pending = [t for t in self._tasks if not t.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        self._unsubscribe()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()

    # ------------------------------------------------------------------ #
    # Filter events
    # ------------------------------------------------------------------ #
    def on_filter_change(self, event: FilterChangeEvent) -> None:
        if event.kind is ChangeKind.MODE:
            if event.previous_mode is not None:
                self._invalidate(event.previous_mode)
            self._sync(event.mode, event.context)
            return

        if event.kind in (ChangeKind.COURSE, ChangeKind.RESET):
            self._clear(event.mode)

        if event.mode is not self.filters.active_mode:
            return
        self._sync(event.mode, event.context)

    def refresh(self, mode: Union[QueryMode, str]) -> asyncio.Task:
        """
        Re-issue the current query of a mode.

        Raises:
            QueryNotReadyError: the mode's required filters are not all set
        """
        mode = QueryMode(mode)
        context = self.filters.context(mode)
        key = context.query_key(self.filters.faculty_id)
        if key is None:
            raise QueryNotReadyError(context.missing_fields())
        return self._issue(mode, key)

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #
    def _sync(self, mode: QueryMode, context: FilterContext) -> None:
        state = self._states[mode]
        key = context.query_key(self.filters.faculty_id)
        if key is None:
            return
        if key != state.key:
            self._issue(mode, key)
        elif state.raw is not None and not state.is_loading:
            # only the cascading filters changed
            self._apply_view(state, context)
            self._notify(state)

    def _issue(self, mode: QueryMode, key: QueryKey) -> asyncio.Task:
        state = self._states[mode]
        state.token += 1
        state.key = key
        state.status = QueryStatus.LOADING
        state.error = None
        logger.debug(f"dispatch: {mode.value} request #{state.token} key={key}")
        self._notify(state)

        task = asyncio.get_running_loop().create_task(self._run(mode, key, state.token))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _run(self, mode: QueryMode, key: QueryKey, token: int) -> None:
        state = self._states[mode]
        _, faculty_id, course_id, *dates = key
        try:
            if mode is QueryMode.SINGLE:
                rows = await self.queries.query_day(faculty_id, course_id, dates[0])
            else:
                rows = await self.queries.query_range(faculty_id, course_id, dates[0], dates[1])

            context = self.filters.context(mode)
            if self._is_stale(state, key, token, context):
                return
            state.raw = rows
            self._apply_view(state, context)
        except Exception as e:
            if self._is_stale(state, key, token, self.filters.context(mode)):
                return
            logger.error(f"dispatch: {mode.value} request #{token} failed: {e}", exc_info=True)
            # previous result stays; a later change or refresh() re-issues
            state.status = QueryStatus.FAILED
            state.error = e
            state.key = None
        self._notify(state)

    def _is_stale(self, state: QueryState, key: QueryKey, token: int, context: FilterContext) -> bool:
        if token != state.token or context.query_key(self.filters.faculty_id) != key:
            logger.debug(f"dispatch: discarded stale {state.mode.value} response #{token}")
            return True
        return False

    def _apply_view(self, state: QueryState, context: FilterContext) -> None:
        if state.mode is QueryMode.SINGLE:
            state.result = partition_by_session(apply_record_filters(state.raw, context))
        else:
            state.result = consolidate(apply_summary_filters(state.raw, context), strict=self.strict)
        state.status = QueryStatus.EMPTY if _is_empty(state.result) else QueryStatus.READY
        state.error = None

    def _clear(self, mode: QueryMode) -> None:
        state = self._states[mode]
        state.token += 1
        state.status = QueryStatus.IDLE
        state.raw = None
        state.result = None
        state.error = None
        state.key = None
        self._notify(state)

    def _invalidate(self, mode: QueryMode) -> None:
        # An older result may stay in place, but IDLE marks it as not matching the context.
        state = self._states[mode]
        if not state.is_loading:
            return
        state.token += 1
        state.key = None
        state.status = QueryStatus.IDLE
        logger.debug(f"dispatch: cancelled in-flight {mode.value} request on mode switch")
        self._notify(state)

    def _notify(self, state: QueryState) -> None:
        snapshot = replace(state)
        for listener in list(self._listeners):
            listener(snapshot)
