from __future__ import annotations

import asyncio
import logging

import pytest

from pylaptimer.models.stopwatch import RunState
from pylaptimer.state.context import StopwatchContext
from pylaptimer.state.time_sync import TimeSync


class _FakeClock:
    def __init__(self, now_ms: float = 0.0) -> None:
        self.now_ms = now_ms

    def __call__(self) -> float:
        return self.now_ms

    def advance(self, ms: float) -> None:
        self.now_ms += ms


class _ManualFrames:
    """Display frames that only arrive when the test releases one."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    async def __call__(self) -> None:
        await self._event.wait()
        self._event.clear()

    def release(self) -> None:
        self._event.set()


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def _make(clock: _FakeClock, ticks: list[int] | None = None) -> tuple[StopwatchContext, TimeSync, _ManualFrames]:
    context = StopwatchContext()
    frames = _ManualFrames()
    sync = TimeSync(
        context,
        clock=clock,
        frame=frames,
        on_tick=ticks.append if ticks is not None else None,
    )
    return context, sync, frames


@pytest.mark.asyncio
async def test_anchor_absorbs_device_elapsed() -> None:
    clock = _FakeClock(1_000.0)
    context, sync, _ = _make(clock)

    sync.on_start(5000)
    clock.advance(2000)

    assert context.run_state == RunState.RUNNING
    assert context.anchor is not None
    assert sync.current_elapsed() == 7000
    sync.clear()


@pytest.mark.asyncio
async def test_refresh_publishes_once_per_frame() -> None:
    clock = _FakeClock()
    ticks: list[int] = []
    context, sync, frames = _make(clock, ticks)

    sync.on_start(0)
    await _settle()
    assert ticks == [0]

    clock.advance(16)
    frames.release()
    await _settle()
    clock.advance(17)
    frames.release()
    await _settle()

    assert ticks == [0, 16, 33]
    assert context.displayed_ms == 33
    assert sync.is_refreshing
    sync.halt()


@pytest.mark.asyncio
async def test_stop_cancels_pending_frame_before_it_publishes() -> None:
    clock = _FakeClock()
    ticks: list[int] = []
    context, sync, frames = _make(clock, ticks)

    sync.on_start(0)
    await _settle()

    # A frame is already due when the stop arrives.
    clock.advance(10_500)
    frames.release()
    sync.on_stop(10_000)
    await _settle()

    assert ticks == [0]
    assert context.displayed_ms == 10_000
    assert context.run_state == RunState.STOPPED
    assert sync.current_elapsed() == 10_000
    assert not sync.is_refreshing


@pytest.mark.asyncio
async def test_halt_keeps_last_displayed_value() -> None:
    clock = _FakeClock()
    context, sync, frames = _make(clock)

    sync.on_start(0)
    await _settle()
    clock.advance(1234)
    frames.release()
    await _settle()

    sync.halt()
    context.run_state = RunState.FINISHED
    clock.advance(5000)

    assert sync.current_elapsed() == 1234
    assert not sync.is_refreshing


@pytest.mark.asyncio
async def test_restart_replaces_refresh_task() -> None:
    clock = _FakeClock()
    ticks: list[int] = []
    _, sync, _ = _make(clock, ticks)

    sync.on_start(0)
    await _settle()
    clock.advance(100)
    sync.on_start(3000)
    await _settle()

    assert ticks == [0, 3000]
    sync.clear()


@pytest.mark.asyncio
async def test_cancel_is_idempotent() -> None:
    clock = _FakeClock()
    context, sync, _ = _make(clock)

    sync.halt()
    sync.clear()
    sync.on_start(0)
    sync.clear()
    sync.clear()
    await _settle()

    assert context.run_state == RunState.IDLE
    assert context.displayed_ms == 0
    assert context.anchor is None
    assert not sync.is_refreshing


@pytest.mark.asyncio
async def test_failing_frame_waiter_is_logged(caplog: pytest.LogCaptureFixture) -> None:
    async def _broken_frame() -> None:
        raise RuntimeError("display surface closed")

    context = StopwatchContext()
    ticks: list[int] = []
    sync = TimeSync(context, clock=_FakeClock(), frame=_broken_frame, on_tick=ticks.append)

    with caplog.at_level(logging.WARNING, logger="pylaptimer.state.time_sync"):
        sync.on_start(0)
        await _settle()

    assert ticks == [0]
    assert not sync.is_refreshing
    assert "Display refresh stopped: display surface closed" in caplog.text
    sync.clear()
