"""State layer.

The state machine in this package is the single owner of the stopwatch run
state, the time anchor and the lap log. Everything else only reads
snapshots of it.
"""
