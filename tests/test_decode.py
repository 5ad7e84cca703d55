from __future__ import annotations

import pytest

from pylaptimer.exceptions import MalformedEventError
from pylaptimer.ingestion.decode import decode_event, decode_notification
from pylaptimer.ingestion.normalize import non_negative_or_none, safe_int
from pylaptimer.models.events import RemoteEventKind


def test_decode_started_notification() -> None:
    record = decode_notification(b'{"event": 1, "time_ms": 5000}')
    assert record.kind == RemoteEventKind.STARTED
    assert record.time_ms == 5000


def test_decode_accepts_bytearray_and_whitespace() -> None:
    record = decode_notification(bytearray(b'  {"event":2,"time_ms":10000}\n'))
    assert record.kind == RemoteEventKind.LAP_ONE
    assert record.time_ms == 10000


def test_all_known_event_codes_map() -> None:
    kinds = [decode_event({"event": code, "time_ms": 0}).kind for code in range(1, 7)]
    assert kinds == [
        RemoteEventKind.STARTED,
        RemoteEventKind.LAP_ONE,
        RemoteEventKind.LAP_TWO,
        RemoteEventKind.FINISHED,
        RemoteEventKind.STOPPED,
        RemoteEventKind.RESET,
    ]


def test_unknown_event_code_is_not_an_error() -> None:
    record = decode_notification(b'{"event": 42, "time_ms": 1}')
    assert record.kind == RemoteEventKind.UNKNOWN


def test_reset_without_time_defaults_to_zero() -> None:
    record = decode_notification(b'{"event": 6}')
    assert record.kind == RemoteEventKind.RESET
    assert record.time_ms == 0


@pytest.mark.parametrize(
    "payload",
    [
        b"not json",
        b"\xff\xfe",
        b"[1, 2]",
        b'{"time_ms": 10}',
        b'{"event": "lap", "time_ms": 10}',
        b'{"event": 2}',
        b'{"event": 2, "time_ms": -5}',
        b'{"event": 5, "time_ms": 1.5}',
    ],
)
def test_malformed_payloads_raise(payload: bytes) -> None:
    with pytest.raises(MalformedEventError) as exc_info:
        decode_notification(payload)
    assert exc_info.value.payload == payload


def test_safe_int_rejects_non_integral_values() -> None:
    assert safe_int("12") == 12
    assert safe_int(3.0) == 3
    assert safe_int(3.5) is None
    assert safe_int(True) is None
    assert safe_int(float("nan")) is None
    assert non_negative_or_none(-1) is None
    assert non_negative_or_none(0) == 0
