"""Helpers for compact debug logging of device payloads."""

from __future__ import annotations


def preview_payload(payload: bytes | bytearray, *, max_bytes: int = 64) -> str:
    """Return a printable, length-bounded rendering of *payload*."""
    data = bytes(payload)
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        shown = data[:max_bytes].hex()
        suffix = "…<truncated>" if len(data) > max_bytes else ""
        return f"<bytes:{len(data)}b hex={shown}{suffix}>"
    if len(text) > max_bytes:
        return f"{text[:max_bytes]!r}…<truncated>"
    return repr(text)
