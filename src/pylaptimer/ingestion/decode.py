"""Notification payload decoding.

The timer firmware notifies UTF-8 JSON objects of the form
``{"event": <code>, "time_ms": <elapsed>}``. Unknown event codes decode to
:attr:`RemoteEventKind.UNKNOWN` so newer firmware never breaks the client;
anything that is not a well-formed object raises
:class:`~pylaptimer.exceptions.MalformedEventError`.
"""

from __future__ import annotations

import json
from typing import Any

from pylaptimer.exceptions import MalformedEventError
from pylaptimer.ingestion.normalize import non_negative_or_none, safe_int
from pylaptimer.models.events import EventRecord, RemoteEventKind


def _parse_object(payload: bytes) -> dict[str, Any]:
    try:
        text = payload.decode("utf-8").strip()
    except UnicodeDecodeError as exc:
        raise MalformedEventError("Notification is not valid UTF-8", payload=payload) from exc
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedEventError(f"Notification is not JSON: {text[:64]}", payload=payload) from exc
    if not isinstance(parsed, dict):
        raise MalformedEventError("Notification decoded to non-object JSON", payload=payload)
    return parsed


def decode_event(data: dict[str, Any], *, payload: bytes = b"") -> EventRecord:
    """Build an :class:`EventRecord` from an already-parsed JSON object."""
    code = safe_int(data.get("event"))
    if code is None:
        raise MalformedEventError(f"Missing or non-integer event code: {data.get('event')!r}", payload=payload)
    kind = RemoteEventKind(code)

    time_ms = non_negative_or_none(data.get("time_ms"))
    if time_ms is None:
        # Reset carries no meaningful time; older firmware omits it.
        if kind == RemoteEventKind.RESET and data.get("time_ms") is None:
            time_ms = 0
        else:
            raise MalformedEventError(
                f"Missing or invalid time_ms: {data.get('time_ms')!r}",
                payload=payload,
            )
    return EventRecord(kind=kind, time_ms=time_ms)


def decode_notification(payload: bytes | bytearray) -> EventRecord:
    """Decode raw notification bytes into an :class:`EventRecord`."""
    raw = bytes(payload)
    return decode_event(_parse_object(raw), payload=raw)
