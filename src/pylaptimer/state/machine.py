"""Stopwatch state machine.

This is the only component allowed to act on decoded device events. It
dispatches each :class:`EventRecord` to a state mutation, keeps the lap log,
reacts to connection changes and gates outbound commands.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pylaptimer._constants import DEFAULT_REFRESH_INTERVAL
from pylaptimer._transport import CommandWriter, encode_command
from pylaptimer.exceptions import NotConnectedError, TransportWriteError
from pylaptimer.models.events import Command, EventRecord, RemoteEventKind
from pylaptimer.models.stopwatch import (
    ConnectionStatus,
    DisplaySnapshot,
    LapLabel,
    LapRecord,
    RunState,
)
from pylaptimer.state.context import StopwatchContext
from pylaptimer.state.time_sync import Clock, FrameWaiter, TimeSync, monotonic_ms

_logger = logging.getLogger(__name__)

ChannelItem = EventRecord | ConnectionStatus | None
"""What the dispatcher drains. ``None`` stops :meth:`StopwatchStateMachine.run`."""

Listener = Callable[[DisplaySnapshot], None]

_LAP_LABELS: dict[RemoteEventKind, LapLabel] = {
    RemoteEventKind.LAP_ONE: LapLabel.LAP_ONE,
    RemoteEventKind.LAP_TWO: LapLabel.LAP_TWO,
}


class StopwatchStateMachine:
    """Single dispatcher from device events to stopwatch state.

    Transitions (initial state ``Idle``):

    * ``Started``: re-anchor, clear the lap log, ``Running``.
    * ``LapOne``/``LapTwo``: append a lap in any state. The log records what
      arrived even when the start of the run was missed.
    * ``Finished``: append ``GOAL``, stop refreshing, keep the displayed
      time, ``Finished``.
    * ``Stopped``: freeze the display at the device value, ``Stopped``.
    * ``Reset`` or connection loss: clear everything, ``Idle``.

    Unknown event kinds are ignored.
    """

    def __init__(
        self,
        *,
        writer: CommandWriter | None = None,
        context: StopwatchContext | None = None,
        clock: Clock = monotonic_ms,
        frame: FrameWaiter | None = None,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
    ) -> None:
        self._context = context or StopwatchContext()
        self._writer = writer
        self._listeners: list[Listener] = []
        self._time_sync = TimeSync(
            self._context,
            clock=clock,
            frame=frame,
            refresh_interval=refresh_interval,
            on_tick=self._on_tick,
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def context(self) -> StopwatchContext:
        return self._context

    @property
    def time_sync(self) -> TimeSync:
        return self._time_sync

    @property
    def run_state(self) -> RunState:
        return self._context.run_state

    @property
    def connection(self) -> ConnectionStatus:
        return self._context.connection

    @property
    def laps(self) -> tuple[LapRecord, ...]:
        return self._context.lap_log.records

    @property
    def elapsed_ms(self) -> int:
        return self._time_sync.current_elapsed()

    def snapshot(self) -> DisplaySnapshot:
        return DisplaySnapshot(
            elapsed_ms=self.elapsed_ms,
            laps=self.laps,
            connection=self._context.connection,
            run_state=self._context.run_state,
        )

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a display listener; returns a callable that removes it."""
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def attach_writer(self, writer: CommandWriter | None) -> None:
        self._writer = writer

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def apply(self, item: EventRecord | ConnectionStatus) -> None:
        """Apply one channel item."""
        if isinstance(item, ConnectionStatus):
            self.set_connection(item)
        else:
            self.dispatch(item)

    async def run(self, channel: asyncio.Queue[ChannelItem]) -> None:
        """Drain *channel* in arrival order until a ``None`` sentinel arrives."""
        while True:
            item = await channel.get()
            try:
                if item is None:
                    return
                self.apply(item)
            except Exception:
                _logger.exception("Failed to apply %r", item)
            finally:
                channel.task_done()

    def dispatch(self, event: EventRecord) -> None:
        kind = event.kind
        if kind == RemoteEventKind.STARTED:
            self._context.lap_log.clear()
            self._time_sync.on_start(event.time_ms)
            _logger.info("Stopwatch started at %dms", event.time_ms)
        elif kind in _LAP_LABELS:
            record = self._context.lap_log.append(_LAP_LABELS[kind], event.time_ms)
            if self._context.run_state != RunState.RUNNING:
                _logger.debug("Lap %s recorded while %s", record.label, self._context.run_state)
        elif kind == RemoteEventKind.FINISHED:
            self._context.lap_log.append(LapLabel.GOAL, event.time_ms)
            self._time_sync.halt()
            self._context.run_state = RunState.FINISHED
            _logger.info("Goal at %dms", event.time_ms)
        elif kind == RemoteEventKind.STOPPED:
            self._time_sync.on_stop(event.time_ms)
            _logger.info("Stopwatch stopped at %dms", event.time_ms)
        elif kind == RemoteEventKind.RESET:
            self._time_sync.clear()
            _logger.info("Stopwatch reset")
        else:
            _logger.debug("Ignoring unknown event kind %r", kind)
            return
        self._notify()

    def reset(self) -> None:
        """Return to ``Idle`` with an empty log and a zero display."""
        self._time_sync.clear()
        self._notify()

    def set_connection(self, status: ConnectionStatus) -> None:
        previous = self._context.connection
        self._context.connection = status
        if status == ConnectionStatus.DISCONNECTED:
            if self._context.run_state != RunState.IDLE or len(self._context.lap_log):
                _logger.info("Connection lost while %s; resetting", self._context.run_state)
            # Clears the display; also cancels the refresh task.
            self._time_sync.clear()
        if previous != status:
            _logger.debug("Connection %s -> %s", previous, status)
        self._notify()

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    async def send(self, command: Command | str) -> None:
        """Forward *command* to the device.

        Raises
        ------
        ValueError
            *command* is not one of ``start``, ``stop``, ``reset``.
        NotConnectedError
            No active connection; nothing is written.
        TransportWriteError
            The write failed. Not retried.
        """
        token = Command(command)
        writer = self._writer
        if self._context.connection != ConnectionStatus.CONNECTED or writer is None:
            raise NotConnectedError(f"Cannot send {token!s}: not connected", command=token.value)
        try:
            await writer.write(encode_command(token))
        except TransportWriteError:
            _logger.warning("Command %s was not delivered", token.value)
            raise
        _logger.debug("Sent command %s", token.value)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _on_tick(self, _elapsed_ms: int) -> None:
        self._notify()

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                _logger.debug("Display listener failed", exc_info=True)
