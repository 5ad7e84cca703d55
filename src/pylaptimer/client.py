"""High-level async client mirroring a remote BLE stopwatch."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any, Protocol

from pylaptimer._ble import LapTimerBleRuntime
from pylaptimer._transport import Transport
from pylaptimer.config import LapTimerConfig
from pylaptimer.exceptions import LapTimerConnectionError, LapTimerError
from pylaptimer.models.events import Command, EventRecord
from pylaptimer.models.stopwatch import ConnectionStatus, DisplaySnapshot, LapRecord, RunState
from pylaptimer.state.machine import ChannelItem, Listener, StopwatchStateMachine
from pylaptimer.state.time_sync import Clock, FrameWaiter, monotonic_ms

_logger = logging.getLogger(__name__)


class TransportFactory(Protocol):
    def __call__(
        self,
        config: LapTimerConfig,
        *,
        on_event: Callable[[EventRecord], None],
        on_disconnect: Callable[[], None],
    ) -> Transport:
        ...


class LapTimerClient:
    """Async client for a BLE lap timer.

    Usage::

        async with LapTimerClient(LapTimerConfig.from_env()) as client:
            client.add_listener(render)
            await client.connect()
            await client.start()
    """

    def __init__(
        self,
        config: LapTimerConfig | None = None,
        *,
        transport_factory: TransportFactory | None = None,
        clock: Clock = monotonic_ms,
        frame: FrameWaiter | None = None,
        on_change: Listener | None = None,
    ) -> None:
        self._config = config or LapTimerConfig()
        self._transport_factory: TransportFactory = transport_factory or LapTimerBleRuntime
        self._machine = StopwatchStateMachine(
            clock=clock,
            frame=frame,
            refresh_interval=self._config.refresh_interval,
        )
        self._transport: Transport | None = None
        self._channel: asyncio.Queue[ChannelItem] | None = None
        self._dispatcher: asyncio.Task[None] | None = None
        if on_change is not None:
            self._machine.add_listener(on_change)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> LapTimerClient:
        self._channel = asyncio.Queue()
        self._dispatcher = asyncio.get_running_loop().create_task(
            self._machine.run(self._channel),
            name="pylaptimer-dispatch",
        )
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.disconnect()
        channel = self._channel
        dispatcher = self._dispatcher
        self._channel = None
        self._dispatcher = None
        if channel is not None and dispatcher is not None:
            channel.put_nowait(None)
            with contextlib.suppress(asyncio.CancelledError):
                await dispatcher

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def connection(self) -> ConnectionStatus:
        return self._machine.connection

    @property
    def run_state(self) -> RunState:
        return self._machine.run_state

    @property
    def elapsed_ms(self) -> int:
        return self._machine.elapsed_ms

    @property
    def laps(self) -> tuple[LapRecord, ...]:
        return self._machine.laps

    def snapshot(self) -> DisplaySnapshot:
        return self._machine.snapshot()

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        """Register a display listener; returns a callable that removes it."""
        return self._machine.add_listener(listener)

    # ------------------------------------------------------------------
    # Connection
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        """Discover the timer, connect and subscribe to its notifications.

        Raises :class:`LapTimerConnectionError` (status ``Failed``) when the
        device cannot be reached.
        """
        self._require_channel()
        if self._transport is not None and self._transport.is_connected:
            return
        await self._set_connection(ConnectionStatus.CONNECTING)

        transport: Transport | None = None

        def _on_event(event: EventRecord) -> None:
            if transport is self._transport:
                self._post(event)
            else:
                _logger.debug("Dropping %r from a closed link", event)

        def _on_disconnect() -> None:
            self._on_link_lost(transport)

        transport = self._transport_factory(
            self._config,
            on_event=_on_event,
            on_disconnect=_on_disconnect,
        )
        # Registered before subscribing so the first notifications are kept.
        self._transport = transport
        try:
            await transport.start()
            if self._transport is not transport:
                raise LapTimerConnectionError("BLE link dropped while connecting")
        except LapTimerConnectionError:
            _logger.warning("Connection to timer failed", exc_info=True)
            if self._transport is transport:
                self._transport = None
            await self._set_connection(ConnectionStatus.FAILED)
            raise
        self._machine.attach_writer(transport)
        await self._set_connection(ConnectionStatus.CONNECTED)

    async def disconnect(self) -> None:
        """Close the link. The stopwatch state resets as on connection loss."""
        transport = self._transport
        self._transport = None
        self._machine.attach_writer(None)
        if transport is not None:
            await transport.stop()
        if self._machine.connection != ConnectionStatus.DISCONNECTED:
            # Queued after any notification the link delivered before closing.
            await self._set_connection(ConnectionStatus.DISCONNECTED)
        else:
            await self.drain()

    async def drain(self) -> None:
        """Wait until every queued notification has been applied."""
        channel = self._channel
        dispatcher = self._dispatcher
        if channel is None or dispatcher is None or dispatcher.done():
            return
        await channel.join()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def send(self, command: Command | str) -> None:
        """Send a control command (``start``, ``stop`` or ``reset``)."""
        await self._machine.send(command)

    async def start(self) -> None:
        await self.send(Command.START)

    async def stop(self) -> None:
        await self.send(Command.STOP)

    async def reset(self) -> None:
        await self.send(Command.RESET)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_channel(self) -> asyncio.Queue[ChannelItem]:
        if self._channel is None:
            raise LapTimerError("Client not initialized. Use 'async with LapTimerClient(...) as client:'")
        return self._channel

    def _post(self, item: EventRecord | ConnectionStatus) -> None:
        channel = self._channel
        if channel is None:
            _logger.debug("Dropping %r received after shutdown", item)
            return
        channel.put_nowait(item)

    async def _set_connection(self, status: ConnectionStatus) -> None:
        """Apply *status* through the channel, after everything already queued."""
        dispatcher = self._dispatcher
        if self._channel is None or dispatcher is None or dispatcher.done():
            self._machine.set_connection(status)
            return
        self._post(status)
        await self.drain()

    def _on_link_lost(self, transport: Transport | None) -> None:
        if transport is None or transport is not self._transport:
            _logger.debug("Ignoring disconnect from a link that is no longer active")
            return
        self._transport = None
        self._machine.attach_writer(None)
        self._post(ConnectionStatus.DISCONNECTED)
