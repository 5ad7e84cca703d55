"""Owned stopwatch context."""

from __future__ import annotations

from dataclasses import dataclass, field

from pylaptimer.models.stopwatch import Anchor, ConnectionStatus, RunState
from pylaptimer.state.lap_log import LapLog


@dataclass(slots=True)
class StopwatchContext:
    """Mutable state shared by :class:`TimeSync` and the state machine.

    Created with the client, reset on disconnect or ``Reset``.
    ``displayed_ms`` is the last value published to the display, or the
    frozen value while not running.
    """

    connection: ConnectionStatus = ConnectionStatus.DISCONNECTED
    run_state: RunState = RunState.IDLE
    anchor: Anchor | None = None
    displayed_ms: int = 0
    lap_log: LapLog = field(default_factory=LapLog)

    def clear_run(self) -> None:
        """Back to ``Idle`` with an empty log and a zero display."""
        self.run_state = RunState.IDLE
        self.anchor = None
        self.displayed_ms = 0
        self.lap_log.clear()
