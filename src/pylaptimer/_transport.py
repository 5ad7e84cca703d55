"""Transport interfaces between the core and the device link."""

from __future__ import annotations

from typing import Protocol

from pylaptimer.models.events import Command


class CommandWriter(Protocol):
    """Structural interface used by the state machine to send commands.

    Implementations raise :class:`~pylaptimer.exceptions.TransportWriteError`
    when the write fails.
    """

    async def write(self, payload: bytes) -> None:
        ...


class Transport(CommandWriter, Protocol):
    """A device link the client can open and close.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`LapTimerBleRuntime`) concrete.
    """

    @property
    def is_connected(self) -> bool:
        ...

    async def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


def encode_command(command: Command | str) -> bytes:
    """Encode a control token as the device expects it (UTF-8, no framing)."""
    return Command(command).value.encode("utf-8")
