"""Internal BLE runtime backed by bleak.

Discovers the timer, subscribes to its notification characteristic and
emits decoded :class:`EventRecord` values. Command writes go to the same
characteristic.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from bleak import BleakClient, BleakScanner
from bleak.backends.device import BLEDevice
from bleak.backends.scanner import AdvertisementData
from bleak.exc import BleakError

from pylaptimer._redact import preview_payload
from pylaptimer.config import LapTimerConfig
from pylaptimer.exceptions import LapTimerConnectionError, MalformedEventError, TransportWriteError
from pylaptimer.ingestion.decode import decode_notification
from pylaptimer.models.events import EventRecord


class LapTimerBleRuntime:
    """bleak runtime that emits decoded events onto the running loop.

    bleak invokes notification and disconnect callbacks on the event loop,
    so *on_event* and *on_disconnect* are called directly.
    """

    def __init__(
        self,
        config: LapTimerConfig,
        *,
        on_event: Callable[[EventRecord], None],
        on_disconnect: Callable[[], None],
        logger: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._on_event = on_event
        self._on_disconnect = on_disconnect
        self._logger = logger or logging.getLogger(__name__)
        self._client: BleakClient | None = None

    @property
    def is_connected(self) -> bool:
        """Whether the BLE link is up."""
        return self._client is not None and self._client.is_connected

    async def _find_device(self) -> BLEDevice:
        config = self._config
        service = config.service_uuid.lower()

        def _matches(device: BLEDevice, adv: AdvertisementData) -> bool:
            if service not in {uuid.lower() for uuid in adv.service_uuids}:
                return False
            if config.device_name is None:
                return True
            return (device.name or adv.local_name) == config.device_name

        try:
            if config.address is not None:
                device = await BleakScanner.find_device_by_address(config.address, timeout=config.scan_timeout)
            else:
                device = await BleakScanner.find_device_by_filter(_matches, timeout=config.scan_timeout)
        except (BleakError, OSError) as exc:
            raise LapTimerConnectionError(f"BLE scan failed: {exc}", address=config.address) from exc

        if device is None:
            raise LapTimerConnectionError(
                "Timer device not found. Check that it is powered and advertising.",
                address=config.address,
            )
        return device

    async def start(self) -> None:
        """Discover, connect and subscribe to notifications."""
        await self.stop()
        device = await self._find_device()
        self._logger.info("Connecting to %s (name=%s)", device.address, device.name)

        client = BleakClient(device, disconnected_callback=self._handle_disconnect)
        try:
            await client.connect()
            await client.start_notify(self._config.characteristic_uuid, self._handle_notification)
        except (BleakError, OSError, asyncio.TimeoutError) as exc:
            await self._close(client)
            raise LapTimerConnectionError(f"BLE connect failed: {exc}", address=device.address) from exc

        self._client = client
        self._logger.info("Connected to %s", device.address)

    async def stop(self) -> None:
        """Unsubscribe and disconnect if connected."""
        client = self._client
        self._client = None
        if client is None:
            return
        self._logger.debug("BLE disconnect requested")
        await self._close(client)

    async def write(self, payload: bytes) -> None:
        client = self._client
        if client is None or not client.is_connected:
            raise TransportWriteError("BLE link is not connected", command=payload.decode("utf-8", "replace"))
        try:
            await client.write_gatt_char(
                self._config.characteristic_uuid,
                payload,
                response=self._config.write_with_response,
            )
        except (BleakError, OSError, asyncio.TimeoutError) as exc:
            raise TransportWriteError(
                f"BLE write failed: {exc}",
                command=payload.decode("utf-8", "replace"),
            ) from exc

    async def _close(self, client: BleakClient) -> None:
        try:
            if client.is_connected:
                await client.stop_notify(self._config.characteristic_uuid)
        except (BleakError, OSError):
            self._logger.debug("BLE stop_notify failed", exc_info=True)
        try:
            await client.disconnect()
        except (BleakError, OSError):
            self._logger.debug("BLE disconnect failed", exc_info=True)

    def _handle_notification(self, _sender: Any, data: bytearray) -> None:
        self._logger.debug("Notification %s", preview_payload(data))
        try:
            event = decode_notification(data)
        except MalformedEventError as exc:
            self._logger.warning("Discarding malformed notification %s: %s", preview_payload(data), exc)
            return
        self._on_event(event)

    def _handle_disconnect(self, _client: BleakClient) -> None:
        self._logger.info("BLE link lost")
        self._on_disconnect()
