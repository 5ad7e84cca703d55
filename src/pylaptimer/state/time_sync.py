"""Local reconstruction of the device's elapsed time.

The device only reports its elapsed time at discrete events. Between
events the display is extrapolated from an :class:`Anchor` taken when the
``Started`` notification arrived, and refreshed once per display frame.
Stopping snaps the display back to the device's own value, which removes
any drift the local clock accumulated during the run.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from collections.abc import Awaitable, Callable

from pylaptimer._constants import DEFAULT_REFRESH_INTERVAL
from pylaptimer.models.stopwatch import Anchor, RunState
from pylaptimer.state.context import StopwatchContext

_logger = logging.getLogger(__name__)

Clock = Callable[[], float]
"""Returns monotonic local time in milliseconds."""

FrameWaiter = Callable[[], Awaitable[None]]
"""Resolves when the display is ready for the next frame."""


def monotonic_ms() -> float:
    return time.monotonic() * 1000


def _log_refresh_failure(task: asyncio.Task[None]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        _logger.warning("Display refresh stopped: %s", exc, exc_info=exc)


class TimeSync:
    """Owns the anchor and the display refresh task.

    The refresh task only exists while the context is ``Running``. Every
    transition out of ``Running`` goes through :meth:`on_stop`,
    :meth:`halt` or :meth:`clear`, which cancel it without awaiting, so a
    frame that was already due can never overwrite a frozen value.

    :meth:`on_start` must be called from the running event loop.
    """

    def __init__(
        self,
        context: StopwatchContext,
        *,
        clock: Clock = monotonic_ms,
        frame: FrameWaiter | None = None,
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
        on_tick: Callable[[int], None] | None = None,
    ) -> None:
        self._context = context
        self._clock = clock
        self._frame: FrameWaiter = frame or functools.partial(asyncio.sleep, refresh_interval)
        self._on_tick = on_tick
        self._task: asyncio.Task[None] | None = None

    @property
    def is_refreshing(self) -> bool:
        """Whether a refresh task is scheduled."""
        return self._task is not None and not self._task.done()

    def current_elapsed(self) -> int:
        """Elapsed milliseconds as the display should show them right now."""
        anchor = self._context.anchor
        if self._context.run_state == RunState.RUNNING and anchor is not None:
            return max(0, anchor.elapsed_at(self._clock()))
        return self._context.displayed_ms

    def on_start(self, device_elapsed_ms: int) -> None:
        """Anchor to the device's elapsed value and start refreshing.

        The device may already be mid-run (e.g. after a reconnect), so the
        anchor absorbs ``device_elapsed_ms`` instead of assuming zero.
        """
        self._cancel_refresh()
        self._context.anchor = Anchor(
            local_reference_ms=self._clock(),
            device_elapsed_ms=device_elapsed_ms,
        )
        self._context.run_state = RunState.RUNNING
        self._context.displayed_ms = device_elapsed_ms
        self._task = asyncio.get_running_loop().create_task(
            self._refresh_loop(),
            name="pylaptimer-refresh",
        )
        self._task.add_done_callback(_log_refresh_failure)
        _logger.debug("Anchored at device elapsed=%dms", device_elapsed_ms)

    def on_stop(self, device_elapsed_ms: int) -> None:
        """Freeze the display at the device's authoritative value."""
        self._cancel_refresh()
        self._context.displayed_ms = device_elapsed_ms
        self._context.run_state = RunState.STOPPED

    def halt(self) -> None:
        """Stop refreshing but keep the last displayed value."""
        self._cancel_refresh()

    def clear(self) -> None:
        """Stop refreshing and return the context to ``Idle``."""
        self._cancel_refresh()
        self._context.clear_run()

    def _cancel_refresh(self) -> None:
        task = self._task
        self._task = None
        if task is not None:
            # No-op for tasks that already finished.
            task.cancel()

    def _publish(self) -> None:
        value = self.current_elapsed()
        self._context.displayed_ms = value
        if self._on_tick is not None:
            self._on_tick(value)

    async def _refresh_loop(self) -> None:
        while self._context.run_state == RunState.RUNNING:
            self._publish()
            await self._frame()
