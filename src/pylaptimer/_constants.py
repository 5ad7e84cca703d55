"""Internal constants shared across the library."""

# GATT identifiers advertised by the timer firmware. Notifications and
# command writes share a single characteristic.
SERVICE_UUID = "1b24e5c4-a39c-4d46-92fb-3bbcb2f34a41"
CHARACTERISTIC_UUID = "9d18d524-2a6e-44ce-8724-445575b23e9a"

DEFAULT_SCAN_TIMEOUT: float = 10.0

# Roughly one display frame at 60 Hz.
DEFAULT_REFRESH_INTERVAL: float = 1 / 60

# ------------------------------------------------------------------
# Notification event codes (``{"event": <code>, "time_ms": <ms>}``)
# ------------------------------------------------------------------

EVENT_STARTED = 1
EVENT_LAP_ONE = 2
EVENT_LAP_TWO = 3
EVENT_FINISHED = 4
EVENT_STOPPED = 5
EVENT_RESET = 6
