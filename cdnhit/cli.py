"""CLI entry point and orchestration for cdnhit."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import click
from rich.logging import RichHandler

from cdnhit import __version__
from cdnhit.config import (
    DEFAULT_DELAY_MS,
    DEFAULT_REQUEST_HEADERS,
    DEFAULT_REQUESTS,
    DEFAULT_SETTINGS_PATH,
    DEFAULT_TIMEOUT,
    SORT_CHOICES,
)
from cdnhit.errors import ConfigError, TransportError
from cdnhit.models import FullResult, ProbeConfig


def _parse_headers(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> dict[str, str]:
    """Turn repeated ``-H "Name: value"`` options into a mapping."""
    headers: dict[str, str] = {}
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"expected 'Name: value', got {raw!r}")
        headers[name.strip()] = value.strip()
    return headers


def _configure_logging(config: ProbeConfig) -> None:
    """Route log records through rich on stderr."""
    from cdnhit.display import err_console

    if config.quiet or config.json_output or config.csv_output:
        level = logging.ERROR
    elif config.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False, show_time=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))


@click.command()
@click.argument("settings", default=DEFAULT_SETTINGS_PATH, required=False)
@click.option("-n", "--requests", "requests_", default=DEFAULT_REQUESTS, type=click.IntRange(min=1),
              help="Requests per destination", show_default=True)
@click.option("-d", "--delay", default=DEFAULT_DELAY_MS, type=click.IntRange(min=0),
              help="Delay between requests in ms", show_default=True)
@click.option("-t", "--timeout", default=DEFAULT_TIMEOUT, type=click.FloatRange(min=0, min_open=True),
              help="Request timeout in seconds", show_default=True)
@click.option("-H", "--header", "headers", multiple=True, callback=_parse_headers,
              help="Extra or overriding request header, 'Name: value' (repeatable)")
@click.option("--user-agent", default=None, help="User-Agent header value")
@click.option("--http2", is_flag=True, help="Negotiate HTTP/2 when the server supports it")
@click.option("--keep-going", is_flag=True,
              help="On a connection error, skip the destination instead of aborting the run")
@click.option("--sort", type=click.Choice(SORT_CHOICES), default="input",
              help="Order of destinations in the report", show_default=True)
@click.option("--show-headers", is_flag=True, help="Print the first response's headers per destination")
@click.option("--json", "json_output", is_flag=True, help="Output JSON to stdout")
@click.option("--csv", "csv_output", is_flag=True, help="Output CSV to stdout")
@click.option("-q", "--quiet", is_flag=True, help="Suppress progress, show only results")
@click.option("-v", "--verbose", is_flag=True, help="Show every response")
@click.option("--list-presets", is_flag=True, help="List CDN header presets and exit")
@click.version_option(version=__version__)
def main(
    settings: str,
    requests_: int,
    delay: int,
    timeout: float,
    headers: dict[str, str],
    user_agent: Optional[str],
    http2: bool,
    keep_going: bool,
    sort: str,
    show_headers: bool,
    json_output: bool,
    csv_output: bool,
    quiet: bool,
    verbose: bool,
    list_presets: bool,
) -> None:
    """cdnhit — CDN cache-hit latency probe.

    Sends repeated GET requests to every destination listed in SETTINGS
    (a CSV with name, url, header_cache_key, header_cache_hit_value),
    classifies each response as a cache hit or miss from a response
    header and reports hit latency percentiles.
    """
    if list_presets:
        from cdnhit.display import render_presets
        from cdnhit.presets import get_preset_map, list_presets as preset_tags

        presets = get_preset_map()
        render_presets([presets[tag] for tag in preset_tags()])
        return

    request_headers = dict(DEFAULT_REQUEST_HEADERS)
    if user_agent:
        request_headers["User-Agent"] = user_agent
    request_headers.update(headers)

    config = ProbeConfig(
        settings_path=settings,
        requests=requests_,
        delay_ms=delay,
        timeout=timeout,
        headers=request_headers,
        http2=http2,
        isolate_transport_errors=keep_going,
        sort=sort,
        verbose=verbose,
        quiet=quiet,
        show_headers=show_headers,
        json_output=json_output,
        csv_output=csv_output,
    )
    _configure_logging(config)

    from cdnhit.display import console, render_error

    try:
        result = asyncio.run(_run(config))
    except ConfigError as exc:
        render_error(f"Invalid settings {config.settings_path!r}: {exc}")
        sys.exit(1)
    except TransportError as exc:
        render_error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        if _interactive(config):
            console.print("\n[yellow]Interrupted.[/yellow]")
        sys.exit(130)

    _handle_output(result, config)


def _interactive(config: ProbeConfig) -> bool:
    return not config.quiet and not config.json_output and not config.csv_output


async def _run(config: ProbeConfig) -> FullResult:
    """Main async orchestration."""
    from cdnhit.display import ProgressTracker, console, render_headers, render_outcome
    from cdnhit.engine import probe_all
    from cdnhit.registry import load_destinations
    from cdnhit.stats import summarize

    destinations = load_destinations(config.settings_path)
    timestamp = datetime.now(timezone.utc).isoformat(timespec="seconds")

    progress = None
    if _interactive(config) and not config.verbose and not config.show_headers:
        progress = ProgressTracker([d.name for d in destinations], config.requests)

    def on_progress(name: str, outcome, total: int) -> None:
        if progress:
            progress.update(name, outcome)
        elif config.verbose and outcome is not None:
            render_outcome(name, outcome)

    headers_callback = render_headers if config.show_headers and _interactive(config) else None

    if _interactive(config):
        console.print(
            f"[bold]Probing {len(destinations)} destinations, "
            f"{config.requests} requests each...[/bold]\n"
        )
    if progress:
        progress.start()

    try:
        results = await probe_all(
            destinations,
            config,
            progress_callback=on_progress,
            headers_callback=headers_callback,
        )
    finally:
        if progress:
            progress.finish()

    return FullResult(
        summaries=summarize(results, sort=config.sort),
        config=config,
        timestamp=timestamp,
    )


def _handle_output(result: FullResult, config: ProbeConfig) -> None:
    """Handle output rendering and export."""
    from cdnhit.display import render_full
    from cdnhit.export import export_csv, export_json

    if config.json_output:
        click.echo(export_json(result))
        return

    if config.csv_output:
        click.echo(export_csv(result), nl=False)
        return

    render_full(result)


if __name__ == "__main__":
    main()
