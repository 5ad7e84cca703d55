"""Data models for timer events and stopwatch state."""

from pylaptimer.models._base import LapTimerEnum, LapTimerModel
from pylaptimer.models.events import Command, EventRecord, RemoteEventKind
from pylaptimer.models.stopwatch import (
    Anchor,
    ConnectionStatus,
    DisplaySnapshot,
    LapLabel,
    LapRecord,
    RunState,
)

__all__ = [
    "Anchor",
    "Command",
    "ConnectionStatus",
    "DisplaySnapshot",
    "EventRecord",
    "LapLabel",
    "LapRecord",
    "LapTimerEnum",
    "LapTimerModel",
    "RemoteEventKind",
    "RunState",
]
