"""Load probe destinations from the settings CSV."""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, TextIO, Union
from urllib.parse import urlparse

from cdnhit.config import DISABLED_MARKER, PRESET_MARKER, SETTINGS_COLUMNS
from cdnhit.errors import ConfigError
from cdnhit.models import Destination
from cdnhit.presets import get_preset

logger = logging.getLogger(__name__)

SettingsSource = Union[str, Path, TextIO]


def load_destinations(source: SettingsSource) -> list[Destination]:
    """Read destinations from *source*, a path or an open text stream.

    The whole load fails on the first malformed row.  Rows whose name
    starts with ``#`` are skipped (and logged); the remaining rows keep
    their order.

    Raises
    ------
    ConfigError
        If the source cannot be read or any row is malformed.
    """
    if isinstance(source, (str, Path)):
        try:
            with open(source, encoding="utf-8-sig", newline="") as f:
                return _parse(f)
        except OSError as exc:
            raise ConfigError(f"cannot read settings file {str(source)!r}: {exc}") from exc
    return _parse(source)


def _parse(stream: Iterable[str]) -> list[Destination]:
    try:
        reader = csv.DictReader(stream)
        fieldnames = [(f or "").strip().lstrip("\ufeff") for f in reader.fieldnames or []]
        missing = [c for c in SETTINGS_COLUMNS if c not in fieldnames]
        if missing:
            raise ConfigError(f"missing column(s): {', '.join(missing)}", line=1)
        reader.fieldnames = fieldnames

        destinations: list[Destination] = []
        seen: set[str] = set()
        for row in reader:
            line = reader.line_num
            if None in row or any(row.get(c) is None for c in SETTINGS_COLUMNS):
                raise ConfigError(
                    f"expected {len(fieldnames)} fields, got a row of a different size",
                    line=line,
                )

            name = row["name"].strip()
            if name.startswith(DISABLED_MARKER):
                logger.info("Skipping disabled destination %r (line %d)", name, line)
                continue

            destination = _build_destination(row, line)
            if destination.name in seen:
                logger.warning(
                    "Duplicate destination name %r (line %d); results are keyed by name",
                    destination.name,
                    line,
                )
            seen.add(destination.name)
            destinations.append(destination)
    except csv.Error as exc:
        raise ConfigError(f"malformed CSV: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"settings are not valid UTF-8: {exc}") from exc

    return destinations


def _build_destination(row: dict[str, str], line: int) -> Destination:
    """Validate one row and resolve any vendor preset."""
    name = row["name"].strip()
    if not name:
        raise ConfigError("destination name is empty", line=line)

    url = row["url"].strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"{name!r}: url {url!r} is not an absolute http(s) URL", line=line)

    header_key = row["header_cache_key"].strip()
    hit_value = row["header_cache_hit_value"]

    if header_key.startswith(PRESET_MARKER):
        try:
            preset = get_preset(header_key[len(PRESET_MARKER):])
        except ValueError as exc:
            raise ConfigError(f"{name!r}: {exc}", line=line) from exc
        header_key = preset.header_key
        hit_value = hit_value or preset.hit_value

    return Destination(
        name=name,
        url=url,
        cache_header_key=header_key,
        cache_expected_hit_value=hit_value,
    )
