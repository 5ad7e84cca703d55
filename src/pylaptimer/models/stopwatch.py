"""Stopwatch state as exposed to display adapters."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pylaptimer.models._base import LapTimerModel


class RunState(StrEnum):
    IDLE = "idle"
    RUNNING = "running"
    FINISHED = "finished"
    STOPPED = "stopped"


class ConnectionStatus(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class LapLabel(StrEnum):
    LAP_ONE = "LAP 1"
    LAP_TWO = "LAP 2"
    GOAL = "GOAL"


class LapRecord(LapTimerModel):
    """A lap mark mirrored from the device.

    ``sequence_number`` follows append order and is independent of the label.
    """

    sequence_number: int = Field(..., ge=1)
    label: LapLabel
    elapsed_ms: int = Field(..., ge=0)


class Anchor(LapTimerModel):
    """Maps local monotonic time onto the device's elapsed time.

    Set on every ``Started`` event. While running, the displayed value is
    ``now - local_reference_ms + device_elapsed_ms``.
    """

    local_reference_ms: float
    device_elapsed_ms: int = Field(..., ge=0)

    def elapsed_at(self, now_ms: float) -> int:
        return int(now_ms - self.local_reference_ms) + self.device_elapsed_ms


class DisplaySnapshot(LapTimerModel):
    """Read-only state pushed to display adapters on every change."""

    elapsed_ms: int = Field(default=0, ge=0)
    laps: tuple[LapRecord, ...] = ()
    connection: ConnectionStatus = ConnectionStatus.DISCONNECTED
    run_state: RunState = RunState.IDLE
