"""Client configuration for pylaptimer."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Mapping
from typing import Any

from pylaptimer._constants import (
    CHARACTERISTIC_UUID,
    DEFAULT_REFRESH_INTERVAL,
    DEFAULT_SCAN_TIMEOUT,
    SERVICE_UUID,
)
from pylaptimer.exceptions import LapTimerConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _env_float(env: Mapping[str, str], key: str) -> float | None:
    raw = env.get(key)
    if raw is None:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise LapTimerConfigError(f"{key} must be a number, got {raw!r}") from exc


@dataclasses.dataclass(frozen=True)
class LapTimerConfig:
    """Client configuration.

    Parameters
    ----------
    address : str or None
        BLE address (or platform UUID on macOS) of the timer. When ``None``
        the client scans for a device advertising ``service_uuid``.
    device_name : str or None
        Optional advertised name filter applied while scanning.
    service_uuid : str
        GATT service exposed by the timer firmware.
    characteristic_uuid : str
        Characteristic used for both notifications and command writes.
    scan_timeout : float
        Seconds to spend discovering the device before giving up.
    refresh_interval : float
        Seconds between display refresh ticks while the stopwatch runs.
    write_with_response : bool
        Ask the device to acknowledge command writes.
    """

    address: str | None = None
    device_name: str | None = None
    service_uuid: str = SERVICE_UUID
    characteristic_uuid: str = CHARACTERISTIC_UUID
    scan_timeout: float = DEFAULT_SCAN_TIMEOUT
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    write_with_response: bool = True

    def __post_init__(self) -> None:
        if self.scan_timeout <= 0:
            raise LapTimerConfigError(f"scan_timeout must be positive, got {self.scan_timeout}")
        if self.refresh_interval <= 0:
            raise LapTimerConfigError(f"refresh_interval must be positive, got {self.refresh_interval}")
        if not self.service_uuid.strip() or not self.characteristic_uuid.strip():
            raise LapTimerConfigError("service_uuid and characteristic_uuid must be non-empty")

    @classmethod
    def from_env(cls, **overrides: Any) -> LapTimerConfig:
        """Create configuration from environment variables.

        Reads optional ``LAPTIMER_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        LapTimerConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_CONFIG_MAP = {
            "LAPTIMER_ADDRESS": "address",
            "LAPTIMER_DEVICE_NAME": "device_name",
            "LAPTIMER_SERVICE_UUID": "service_uuid",
            "LAPTIMER_CHARACTERISTIC_UUID": "characteristic_uuid",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Numeric values are parsed separately
        scan_timeout = _env_float(env, "LAPTIMER_SCAN_TIMEOUT")
        if scan_timeout is not None and "scan_timeout" not in overrides:
            config_kwargs["scan_timeout"] = scan_timeout

        refresh_interval = _env_float(env, "LAPTIMER_REFRESH_INTERVAL")
        if refresh_interval is not None and "refresh_interval" not in overrides:
            config_kwargs["refresh_interval"] = refresh_interval

        if "write_with_response" not in overrides:
            config_kwargs["write_with_response"] = _env_bool(
                env.get("LAPTIMER_WRITE_WITH_RESPONSE"),
                True,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
