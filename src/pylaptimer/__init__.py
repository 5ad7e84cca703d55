"""pylaptimer - Async Python client mirroring a BLE lap timer."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pylaptimer")
except PackageNotFoundError:
    __version__ = "0+local"
from pylaptimer.client import LapTimerClient
from pylaptimer.config import LapTimerConfig
from pylaptimer.exceptions import (
    LapTimerConfigError,
    LapTimerConnectionError,
    LapTimerError,
    MalformedEventError,
    NotConnectedError,
    TransportWriteError,
)
from pylaptimer.formatting import format_lap, format_time
from pylaptimer.models import (
    Anchor,
    Command,
    ConnectionStatus,
    DisplaySnapshot,
    EventRecord,
    LapLabel,
    LapRecord,
    RemoteEventKind,
    RunState,
)
from pylaptimer.state.machine import StopwatchStateMachine
from pylaptimer.state.time_sync import TimeSync

__all__ = [
    "__version__",
    "Anchor",
    "Command",
    "ConnectionStatus",
    "DisplaySnapshot",
    "EventRecord",
    "LapLabel",
    "LapRecord",
    "LapTimerClient",
    "LapTimerConfig",
    "LapTimerConfigError",
    "LapTimerConnectionError",
    "LapTimerError",
    "MalformedEventError",
    "NotConnectedError",
    "RemoteEventKind",
    "RunState",
    "StopwatchStateMachine",
    "TimeSync",
    "TransportWriteError",
    "format_lap",
    "format_time",
]
