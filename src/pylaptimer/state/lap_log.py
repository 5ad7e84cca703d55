"""Append-only lap log."""

from __future__ import annotations

from pylaptimer.models.stopwatch import LapLabel, LapRecord


class LapLog:
    """Ordered lap records in arrival order.

    Records are never mutated or removed individually; :meth:`clear` drops
    all of them and restarts numbering at 1.
    """

    def __init__(self) -> None:
        self._records: list[LapRecord] = []

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[LapRecord, ...]:
        return tuple(self._records)

    def append(self, label: LapLabel, elapsed_ms: int) -> LapRecord:
        record = LapRecord(
            sequence_number=len(self._records) + 1,
            label=label,
            elapsed_ms=elapsed_ms,
        )
        self._records.append(record)
        return record

    def clear(self) -> None:
        self._records.clear()
