"""Custom exception hierarchy for pylaptimer."""

from __future__ import annotations


class LapTimerError(Exception):
    """Base exception for all pylaptimer errors."""


class LapTimerConfigError(LapTimerError):
    """Invalid or missing configuration."""


class LapTimerConnectionError(LapTimerError):
    """Discovery, connection or notification subscription failed."""

    def __init__(self, message: str, *, address: str | None = None) -> None:
        self.address = address
        super().__init__(message)


class NotConnectedError(LapTimerError):
    """A command was attempted while no connection is active.

    The command is not written and no state is mutated.
    """

    def __init__(self, message: str, *, command: str = "") -> None:
        self.command = command
        super().__init__(message)


class MalformedEventError(LapTimerError):
    """A notification payload could not be decoded into an event record."""

    def __init__(self, message: str, *, payload: bytes = b"") -> None:
        self.payload = payload
        super().__init__(message)


class TransportWriteError(LapTimerError):
    """Writing a command to the device failed.

    Non-fatal. The command is not retried; retrying is left to the caller.
    """

    def __init__(self, message: str, *, command: str = "") -> None:
        self.command = command
        super().__init__(message)
