"""CDN vendor cache-header presets.

Each preset names the response header a vendor uses to report cache
status and the value it sends on a hit.  A settings row selects one by
writing ``@<vendor>`` in its ``header_cache_key`` column.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CachePreset:
    """Header rule for one CDN vendor."""

    vendor: str
    label: str
    header_key: str
    hit_value: str


_PRESETS: dict[str, CachePreset] = {
    p.vendor: p
    for p in (
        CachePreset("cloudfront", "Amazon CloudFront", "x-cache", "Hit from cloudfront"),
        CachePreset("cloudflare", "Cloudflare", "cf-cache-status", "HIT"),
        CachePreset("fastly", "Fastly", "x-cache", "HIT"),
        CachePreset("akamai", "Akamai", "x-cache", "TCP_HIT"),
        CachePreset("azure", "Azure CDN", "x-cache", "TCP_HIT"),
        CachePreset("bunny", "Bunny CDN", "cdn-cache", "HIT"),
        CachePreset("varnish", "Varnish", "x-varnish-cache", "HIT"),
        CachePreset("nginx", "nginx proxy_cache", "x-cache-status", "HIT"),
    )
}


def get_preset_map() -> dict[str, CachePreset]:
    """Return the mapping of vendor tag → preset."""
    return _PRESETS


def get_preset(vendor: str) -> CachePreset:
    """Look up a preset by vendor tag (case-insensitive)."""
    key = vendor.strip().lower()
    if key not in _PRESETS:
        raise ValueError(f"Unknown CDN preset: {vendor!r}. Available: {list_presets()}")
    return _PRESETS[key]


def list_presets() -> list[str]:
    """Return sorted list of available vendor tags."""
    return sorted(_PRESETS)
