"""Configuration for the Shelly adapter.

Timeouts, cache lifetimes, and polling values.
Device address and credentials live in .env (SHELLY_HOST, SHELLY_USER, ...),
not here.
"""

import os

# ---------------------------------------------------------------------------
# Device address (overridden by .env / --host)
# ---------------------------------------------------------------------------
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 80

SHELLY_HOST = os.getenv("SHELLY_HOST", DEFAULT_HOST)
SHELLY_PORT = int(os.getenv("SHELLY_PORT", DEFAULT_PORT))
SHELLY_USER = os.getenv("SHELLY_USER") or None
SHELLY_PASSWORD = os.getenv("SHELLY_PASSWORD") or None

# ---------------------------------------------------------------------------
# Endpoint templates ({provider_host} is filled from the Setting)
# ---------------------------------------------------------------------------
GEN1_BASE_URL = "http://{provider_host}/"
GEN2_BASE_URL = "http://{provider_host}/rpc/"
PROBE_ENDPOINT = "shelly"   # answered by both generations

# ---------------------------------------------------------------------------
# Polling / loop timing
# ---------------------------------------------------------------------------
POLL_INTERVAL_SECONDS = 60   # 1 minute, all day

# ---------------------------------------------------------------------------
# HTTP resilience
# ---------------------------------------------------------------------------
HTTP_CONNECT_TIMEOUT = 5     # seconds
HTTP_READ_TIMEOUT = 10       # seconds
HTTP_TIMEOUT = (HTTP_CONNECT_TIMEOUT, HTTP_READ_TIMEOUT)
RETRY_DELAY = 2              # seconds between retry attempts
CANCEL_CHECK_SECONDS = 0.05  # how often a blocked request looks at the cancel event

# ---------------------------------------------------------------------------
# Snapshot cache lifetimes per property group (seconds, 0 = always fetch)
# ---------------------------------------------------------------------------
GEN1_CACHE_SECONDS = {
    "Settings": 3600,
    "Status": 0,
    "Shelly": 3600,
}

GEN2_CACHE_SECONDS = {
    "Configuration": 1810,
    "SysConfiguration": 3600,
    "SysStatus": 3600,
    "Status": 0,
    "Components": 0,
    "DeviceInfo": 3600,
}

# ---------------------------------------------------------------------------
# Alert thresholds (hours of continuous failure before alerting)
# ---------------------------------------------------------------------------
ALERT_THRESHOLDS = {
    "shelly": 1.0,
}
