"""Remote timer events and outbound commands."""

from __future__ import annotations

from enum import StrEnum

from pydantic import Field

from pylaptimer._constants import (
    EVENT_FINISHED,
    EVENT_LAP_ONE,
    EVENT_LAP_TWO,
    EVENT_RESET,
    EVENT_STARTED,
    EVENT_STOPPED,
)
from pylaptimer.models._base import LapTimerEnum, LapTimerModel


class RemoteEventKind(LapTimerEnum):
    """Discrete timing event reported by the device."""

    UNKNOWN = -1
    STARTED = EVENT_STARTED
    LAP_ONE = EVENT_LAP_ONE
    LAP_TWO = EVENT_LAP_TWO
    FINISHED = EVENT_FINISHED
    STOPPED = EVENT_STOPPED
    RESET = EVENT_RESET


class EventRecord(LapTimerModel):
    """One decoded notification.

    ``time_ms`` is the device's own elapsed reading when the event
    happened, not a wall-clock timestamp.
    """

    kind: RemoteEventKind
    time_ms: int = Field(..., ge=0)


class Command(StrEnum):
    """Control tokens accepted by the device, written verbatim."""

    START = "start"
    STOP = "stop"
    RESET = "reset"
