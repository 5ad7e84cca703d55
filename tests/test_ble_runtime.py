from __future__ import annotations

import logging

import pytest

from pylaptimer._ble import LapTimerBleRuntime
from pylaptimer.config import LapTimerConfig
from pylaptimer.exceptions import TransportWriteError
from pylaptimer.models.events import EventRecord, RemoteEventKind


def _runtime(events: list[EventRecord], losses: list[None]) -> LapTimerBleRuntime:
    return LapTimerBleRuntime(
        LapTimerConfig(),
        on_event=events.append,
        on_disconnect=lambda: losses.append(None),
    )


def test_notification_is_decoded_and_forwarded() -> None:
    events: list[EventRecord] = []
    runtime = _runtime(events, [])

    runtime._handle_notification(None, bytearray(b'{"event": 3, "time_ms": 20000}'))  # noqa: SLF001

    assert events == [EventRecord(kind=RemoteEventKind.LAP_TWO, time_ms=20_000)]


def test_malformed_notification_is_logged_and_dropped(caplog: pytest.LogCaptureFixture) -> None:
    events: list[EventRecord] = []
    runtime = _runtime(events, [])

    with caplog.at_level(logging.WARNING, logger="pylaptimer._ble"):
        runtime._handle_notification(None, bytearray(b"garbage"))  # noqa: SLF001

    assert events == []
    assert "malformed notification" in caplog.text


def test_disconnect_callback_is_forwarded() -> None:
    losses: list[None] = []
    runtime = _runtime([], losses)

    runtime._handle_disconnect(object())  # type: ignore[arg-type]  # noqa: SLF001

    assert losses == [None]
    assert not runtime.is_connected


@pytest.mark.asyncio
async def test_write_without_link_raises_write_error() -> None:
    runtime = _runtime([], [])

    with pytest.raises(TransportWriteError) as exc_info:
        await runtime.write(b"start")

    assert exc_info.value.command == "start"


@pytest.mark.asyncio
async def test_stop_without_link_is_noop() -> None:
    runtime = _runtime([], [])
    await runtime.stop()
    assert not runtime.is_connected
