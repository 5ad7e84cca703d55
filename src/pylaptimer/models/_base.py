"""Base model and enum for timer device payloads.

Models inherit from :class:`LapTimerModel`, a frozen pydantic model that
ignores unknown keys so newer firmware can add fields without breaking
older clients.

Device-side enums inherit from :class:`LapTimerEnum` which adds an
``UNKNOWN`` member at ``-1`` and a ``_missing_`` hook that returns
``UNKNOWN`` for any value without a mapped member.
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict


class LapTimerEnum(enum.IntEnum):
    """Base for enums decoded from device payloads.

    Every subclass **must** define ``UNKNOWN = -1``.
    Values the device sends that have no mapped member automatically
    resolve to ``UNKNOWN`` instead of raising ``ValueError``.
    """

    @classmethod
    def _missing_(cls, value: object) -> LapTimerEnum:
        # pylint: disable=no-member
        if hasattr(cls, "UNKNOWN"):
            unknown: LapTimerEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class LapTimerModel(BaseModel):
    """Base for immutable pylaptimer records."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )
