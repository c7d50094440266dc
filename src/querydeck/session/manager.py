"""Session manager: the single owner of interactive session state.

Phases::

    idle --execute--> awaiting_confirmation   (confirmation required)
    idle --execute--> executing               (confirmation not required)
    awaiting_confirmation --cancel--> idle
    awaiting_confirmation --confirm--> executing
    executing --gateway done--> idle

The gateway call is the only suspension point. The phase is switched to
``executing`` before the first await, so a second execute request arriving while
a call is in flight is ignored instead of racing the first one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from querydeck.config.settings import ExecutionSettings, FormattingSettings
from querydeck.gateway.interface import ExecutionGateway, GatewayError
from querydeck.models.session import (
    ConnectionCoordinates,
    HistoryEntry,
    Notification,
    NotificationLevel,
    QueryResult,
    SessionPhase,
    SessionSnapshot,
)
from querydeck.session.gate import requires_confirmation
from querydeck.sql.formatter import format_sql
from querydeck.store.interface import HistoryStore
from querydeck.store.memory import MemoryHistoryStore

logger = logging.getLogger(__name__)

Notifier = Callable[[Notification], None]
Clock = Callable[[], datetime]


class SessionStateError(RuntimeError):
    """Raised when an operation is requested from a phase that does not allow it."""

    def __init__(self, operation: str, phase: SessionPhase) -> None:
        super().__init__(f"cannot {operation} while {phase.value}")
        self.operation = operation
        self.phase = phase


@dataclass
class SessionState:
    query: str = ""
    results: QueryResult = field(default_factory=list)
    connection: ConnectionCoordinates = field(default_factory=ConnectionCoordinates)
    instances: list[str] = field(default_factory=list)
    databases: list[str] = field(default_factory=list)
    formatting: FormattingSettings = field(default_factory=FormattingSettings)
    execution: ExecutionSettings = field(default_factory=ExecutionSettings)
    history: HistoryStore = field(default_factory=MemoryHistoryStore)
    phase: SessionPhase = SessionPhase.idle
    notifications: list[Notification] = field(default_factory=list)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SessionManager:
    def __init__(
        self,
        gateway: ExecutionGateway,
        *,
        state: SessionState | None = None,
        notifier: Notifier | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._gateway = gateway
        self._state = state or SessionState()
        self._notifier = notifier
        self._clock = clock or _utcnow
        self._last_timestamp: datetime | None = None

    @property
    def phase(self) -> SessionPhase:
        return self._state.phase

    @property
    def query(self) -> str:
        return self._state.query

    @property
    def results(self) -> QueryResult:
        return list(self._state.results)

    @property
    def connection(self) -> ConnectionCoordinates:
        return self._state.connection

    @property
    def history(self) -> Sequence[HistoryEntry]:
        return self._state.history.all()

    @property
    def notifications(self) -> Sequence[Notification]:
        return list(self._state.notifications)

    @property
    def formatting(self) -> FormattingSettings:
        return self._state.formatting.model_copy()

    @property
    def execution(self) -> ExecutionSettings:
        return self._state.execution.model_copy()

    def get_history_entry(self, index: int) -> HistoryEntry:
        return self._state.history.get(index)

    def snapshot(self) -> SessionSnapshot:
        state = self._state
        return SessionSnapshot(
            phase=state.phase,
            query=state.query,
            results=list(state.results),
            connection=state.connection,
            instances=list(state.instances),
            databases=list(state.databases),
            multiline_layout=state.formatting.multiline_layout,
            confirm_before_execute=state.execution.confirm_before_execute,
            history_size=len(state.history),
            notifications=list(state.notifications),
        )

    def notify(self, level: NotificationLevel, title: str, message: str) -> Notification:
        notification = Notification(
            level=level, title=title, message=message, created_at=self._clock()
        )
        self._state.notifications.append(notification)
        if self._notifier is not None:
            self._notifier(notification)
        return notification

    # --- Query buffer -------------------------------------------------------

    def set_query(self, text: str) -> None:
        self._state.query = text

    def format_query(self) -> str:
        """Rewrite the query buffer in place with the current formatting settings."""
        self._state.query = format_sql(self._state.query, self._state.formatting)
        return self._state.query

    # --- Settings -------------------------------------------------------------

    def toggle_setting(self, name: str, value: bool) -> None:
        """Set a formatting or execution flag. Applies to the next format/execute call.

        Raises:
            ValueError: If ``name`` is not a known setting.
        """
        if name == "multiline_layout":
            self._state.formatting.multiline_layout = bool(value)
        elif name == "confirm_before_execute":
            self._state.execution.confirm_before_execute = bool(value)
        else:
            raise ValueError(f"Unknown setting: {name}")
        logger.debug("Setting %s=%s", name, value)

    # --- Connection -----------------------------------------------------------

    async def set_connection_coordinates(self, coords: ConnectionCoordinates) -> None:
        """Assign coordinates, then refresh the instance/database lists.

        Refresh failures are reported as notifications; the phase never changes.
        """
        previous = self._state.connection
        self._state.connection = coords
        if coords.project_id != previous.project_id:
            self._state.instances = []
            self._state.databases = []
        elif coords.instance_id != previous.instance_id:
            self._state.databases = []
        await self.refresh_catalog()

    async def initialize(self) -> bool:
        """Load instances for the current project. Returns False when it could not."""
        project_id = self._state.connection.project_id
        if not project_id.strip():
            self.notify("error", "Error", "Please enter a Project ID.")
            return False
        if not await self._refresh_instances():
            return False
        self.notify("success", "Success", "Spanner instances initialized successfully.")
        return True

    async def refresh_catalog(self) -> None:
        coords = self._state.connection
        if not coords.project_id:
            return
        if not await self._refresh_instances():
            return
        if coords.instance_id:
            await self._refresh_databases()

    def _is_current(self, project_id: str, instance_id: str | None = None) -> bool:
        # The connection may have moved on while a listing request was in flight.
        current = self._state.connection
        if current.project_id != project_id:
            return False
        return instance_id is None or current.instance_id == instance_id

    async def _refresh_instances(self) -> bool:
        project_id = self._state.connection.project_id
        try:
            instances = await self._gateway.list_instances(project_id)
        except GatewayError as e:
            if not self._is_current(project_id):
                logger.debug("Ignoring instance listing error for stale project %s", project_id)
                return False
            logger.error("Failed to fetch instances: %s", e)
            self.notify("error", "Error", "Failed to fetch instances. Please try again.")
            return False
        if not self._is_current(project_id):
            logger.debug("Dropping instance list for stale project %s", project_id)
            return False
        self._state.instances = list(instances)
        return True

    async def _refresh_databases(self) -> bool:
        coords = self._state.connection
        project_id, instance_id = coords.project_id, coords.instance_id
        try:
            databases = await self._gateway.list_databases(project_id, instance_id)
        except GatewayError as e:
            if not self._is_current(project_id, instance_id):
                logger.debug("Ignoring database listing error for stale instance %s", instance_id)
                return False
            logger.error("Failed to fetch databases: %s", e)
            self.notify("error", "Error", "Failed to fetch databases. Please try again.")
            return False
        if not self._is_current(project_id, instance_id):
            logger.debug("Dropping database list for stale instance %s", instance_id)
            return False
        self._state.databases = list(databases)
        return True

    # --- Execution ------------------------------------------------------------

    async def request_execute(self) -> SessionPhase:
        """Ask to run the current query buffer.

        Returns the phase after the request was handled: ``awaiting_confirmation``
        when approval is needed, otherwise ``idle`` once the execution finished.
        """
        phase = self._state.phase
        if phase == SessionPhase.executing:
            logger.warning("Execute request ignored: a query is already running")
            return phase
        if phase == SessionPhase.awaiting_confirmation:
            return phase

        if requires_confirmation(self._state.execution):
            self._state.phase = SessionPhase.awaiting_confirmation
            return self._state.phase

        await self._execute()
        return self._state.phase

    async def confirm(self) -> SessionPhase:
        if self._state.phase != SessionPhase.awaiting_confirmation:
            raise SessionStateError("confirm", self._state.phase)
        await self._execute()
        return self._state.phase

    def cancel(self) -> SessionPhase:
        if self._state.phase != SessionPhase.awaiting_confirmation:
            raise SessionStateError("cancel", self._state.phase)
        self._state.phase = SessionPhase.idle
        return self._state.phase

    async def rerun(self, entry: HistoryEntry) -> SessionPhase:
        """Load a past query into the buffer and run it through the normal execute flow."""
        self._state.query = entry.query
        return await self.request_execute()

    def _next_timestamp(self) -> datetime:
        now = self._clock()
        if self._last_timestamp is not None and now <= self._last_timestamp:
            now = self._last_timestamp + timedelta(microseconds=1)
        self._last_timestamp = now
        return now

    async def _execute(self) -> None:
        # Set before the first await; this is the re-entrancy guard.
        self._state.phase = SessionPhase.executing
        submitted = self._state.query
        coords = self._state.connection
        try:
            results = await self._gateway.execute_query(
                coords.project_id, coords.instance_id, coords.database_id, submitted
            )
        except GatewayError as e:
            logger.error("Failed to execute query: %s", e)
            self.notify("error", "Error", "Failed to execute query. Please try again.")
        else:
            rows = list(results)
            self._state.results = rows
            self._state.history.append(
                HistoryEntry(query=submitted, results=rows, timestamp=self._next_timestamp())
            )
            logger.info("Query returned %d rows", len(rows))
        finally:
            self._state.phase = SessionPhase.idle
