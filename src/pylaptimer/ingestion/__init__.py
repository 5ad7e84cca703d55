"""Ingestion layer.

Turns raw notification payloads into :class:`~pylaptimer.models.EventRecord`
values. Only the state layer is allowed to act on them.
"""
