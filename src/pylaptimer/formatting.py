"""Pure display formatting helpers."""

from __future__ import annotations

from pylaptimer.models.stopwatch import LapRecord


def format_time(ms: int) -> str:
    """Render *ms* as ``MM:SS.mmm``.

    Minutes are zero-padded to two digits and never roll over into hours,
    so one hour renders as ``60:00.000``.
    """
    if ms < 0:
        raise ValueError(f"elapsed time must be non-negative, got {ms}")
    total_seconds, millis = divmod(int(ms), 1000)
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes:02d}:{seconds:02d}.{millis:03d}"


def format_lap(record: LapRecord) -> str:
    """Render a lap line, e.g. ``"2. LAP 2: 00:20.000"``."""
    return f"{record.sequence_number}. {record.label}: {format_time(record.elapsed_ms)}"
