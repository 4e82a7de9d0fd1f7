"""Constants and configuration for cdnhit."""

from cdnhit import __version__

# Settings file read when no path is given on the command line
DEFAULT_SETTINGS_PATH = "./settings.csv"

# Settings CSV layout
SETTINGS_COLUMNS = ["name", "url", "header_cache_key", "header_cache_hit_value"]
DISABLED_MARKER = "#"  # name prefix that disables a row
PRESET_MARKER = "@"  # header_cache_key prefix that selects a vendor preset

# Default measurement settings
DEFAULT_REQUESTS = 50
DEFAULT_DELAY_MS = 50
DEFAULT_TIMEOUT = 10.0

# User agent for HTTP requests
USER_AGENT = f"cdnhit/{__version__}"

# Request headers sent with every probe unless overridden
DEFAULT_REQUEST_HEADERS = {
    "Accept-Encoding": "gzip, deflate, br",
    "Accept-Language": "en-US,en;q=0.9",
    "User-Agent": USER_AGENT,
}

# Percentile ladder: (label, fraction). Max is reported separately.
PERCENTILES = [
    ("p50", "0.50"),
    ("p75", "0.75"),
    ("p90", "0.90"),
    ("p95", "0.95"),
    ("p98", "0.98"),
]
LADDER_LABELS = {
    "p50": "50%",
    "p75": "75%",
    "p90": "90%",
    "p95": "95%",
    "p98": "98%",
    "max": "Max",
}

# Hit latency color thresholds (milliseconds)
FAST_THRESHOLD_MS = 50.0    # Green: <= 50ms
MEDIUM_THRESHOLD_MS = 150.0  # Yellow: <= 150ms
# Red: > 150ms

# Hit ratio color thresholds (percent)
GOOD_HIT_RATIO = 90
FAIR_HIT_RATIO = 50

# Summary ordering choices
SORT_CHOICES = ["input", "name", "p50"]
