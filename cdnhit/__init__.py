"""cdnhit: CDN cache-hit latency probe."""

__version__ = "0.1.0"
