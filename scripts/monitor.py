#!/usr/bin/env python3
"""Console monitor for a BLE lap timer.

Connects to the timer, mirrors its running time and lap log to stdout and
optionally sends one control command after connecting.

Use this to check a device end to end without a display adapter.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pylaptimer import (  # noqa: E402
    DisplaySnapshot,
    LapTimerClient,
    LapTimerConfig,
    LapTimerError,
    format_lap,
    format_time,
)

_LOG = logging.getLogger("monitor")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Mirror a BLE lap timer on the console.",
    )
    parser.add_argument(
        "--address",
        default=None,
        help="Device address (default: scan by service UUID).",
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Only accept devices advertising this name.",
    )
    parser.add_argument(
        "--duration",
        type=int,
        default=0,
        help="Maximum runtime in seconds (0 = run until Ctrl+C).",
    )
    parser.add_argument(
        "--send",
        choices=("start", "stop", "reset"),
        default=None,
        help="Send one command after connecting.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logs.",
    )
    return parser.parse_args()


class _ConsoleDisplay:
    """Prints the time once per tenth of a second and each new lap once."""

    def __init__(self) -> None:
        self._last_text = ""
        self._laps_shown = 0

    def __call__(self, snapshot: DisplaySnapshot) -> None:
        if len(snapshot.laps) < self._laps_shown:
            self._laps_shown = 0
        for record in snapshot.laps[self._laps_shown :]:
            print(f"\n[lap] {format_lap(record)}")
        self._laps_shown = len(snapshot.laps)

        text = f"{format_time(snapshot.elapsed_ms)[:-2]}  {snapshot.run_state}  ({snapshot.connection})"
        if text != self._last_text:
            self._last_text = text
            print(f"\r{text}", end="", flush=True)


async def _run(args: argparse.Namespace) -> int:
    overrides = {key: value for key, value in (("address", args.address), ("device_name", args.name)) if value}
    config = LapTimerConfig.from_env(**overrides)

    async with LapTimerClient(config, on_change=_ConsoleDisplay()) as client:
        try:
            await client.connect()
        except LapTimerError as exc:
            print(f"[monitor] Connection failed: {exc}", file=sys.stderr)
            return 2

        if args.send:
            try:
                await client.send(args.send)
            except LapTimerError as exc:
                print(f"\n[monitor] {args.send} failed: {exc}", file=sys.stderr)

        loop = asyncio.get_running_loop()
        started_at = loop.time()
        while args.duration <= 0 or loop.time() - started_at < args.duration:
            await asyncio.sleep(0.5)
        print()
    return 0


def _main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_run(args))
    except KeyboardInterrupt:
        print()
        return 0


if __name__ == "__main__":
    raise SystemExit(_main())
