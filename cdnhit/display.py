"""Rich terminal output for cdnhit."""

from __future__ import annotations

from typing import Optional

import httpx
from rich.console import Console
from rich.live import Live
from rich.table import Table
from rich.text import Text

from cdnhit.classifier import decode_header_value
from cdnhit.config import (
    FAIR_HIT_RATIO,
    FAST_THRESHOLD_MS,
    GOOD_HIT_RATIO,
    LADDER_LABELS,
    MEDIUM_THRESHOLD_MS,
)
from cdnhit.errors import HeaderDecodeFailure
from cdnhit.models import Destination, DestinationSummary, FullResult, ProbeOutcome
from cdnhit.presets import CachePreset

console = Console()
err_console = Console(stderr=True)

LADDER_KEYS = ["p50", "p75", "p90", "p95", "p98", "max"]


def _color_for_ms(value: float) -> str:
    """Return a Rich color name based on hit latency."""
    if value <= FAST_THRESHOLD_MS:
        return "green"
    elif value <= MEDIUM_THRESHOLD_MS:
        return "yellow"
    return "red"


def _color_for_ratio(percent: int) -> str:
    if percent >= GOOD_HIT_RATIO:
        return "green"
    elif percent >= FAIR_HIT_RATIO:
        return "yellow"
    return "red"


def _fmt_ms(value: float, colorize: bool = True) -> Text:
    """Format a millisecond value with optional color."""
    text = f"{value:.1f}ms"
    if colorize:
        return Text(text, style=_color_for_ms(value))
    return Text(text)


def _fmt_ratio(summary: DestinationSummary) -> Text:
    if summary.hit_ratio_percent is None:
        return Text("—", style="dim")
    pct = summary.hit_ratio_percent
    return Text(f"{pct}%", style=_color_for_ratio(pct))


# ── Progress tracking ─────────────────────────────────────────────────


class ProgressTracker:
    """Live progress display for probing."""

    def __init__(self, names: list[str], total_requests: int):
        self.names = names
        self.total_requests = total_requests
        self.progress: dict[str, int] = {n: 0 for n in names}
        self.hits: dict[str, int] = {n: 0 for n in names}
        self.status: dict[str, str] = {n: "waiting" for n in names}
        self.live: Optional[Live] = None

    def _build_table(self) -> Table:
        table = Table(show_header=True, expand=False, border_style="dim")
        table.add_column("Destination", style="bold")
        table.add_column("Progress", min_width=20)
        table.add_column("Hits", justify="right")
        table.add_column("Status")

        for name in self.names:
            completed = self.progress[name]
            status = self.status[name]
            bar_width = 15
            filled = int((completed / self.total_requests) * bar_width) if self.total_requests > 0 else 0
            bar = "[green]" + "█" * filled + "[/green]" + "[dim]░[/dim]" * (bar_width - filled)
            progress_text = f"{bar} {completed}/{self.total_requests}"

            style = "green" if status == "done" else ("red" if status == "stopped" else "yellow")
            status_text = f"[{style}]{status}[/{style}]"

            table.add_row(name, progress_text, str(self.hits[name]), status_text)

        return table

    def start(self) -> None:
        self.live = Live(self._build_table(), console=console, refresh_per_second=4)
        self.live.start()

    def _stop_unfinished(self, current: Optional[str] = None) -> None:
        # A destination left "probing" ended early (non-2xx or transport error)
        for other, status in self.status.items():
            if other != current and status == "probing":
                self.status[other] = "stopped"

    def update(self, name: str, outcome: Optional[ProbeOutcome]) -> None:
        if outcome is None:
            self._stop_unfinished(current=name)
            self.status[name] = "probing"
        else:
            self.progress[name] = outcome.index + 1
            if outcome.cache_hit:
                self.hits[name] += 1
            if self.progress[name] >= self.total_requests:
                self.status[name] = "done"
        if self.live:
            self.live.update(self._build_table())

    def finish(self) -> None:
        self._stop_unfinished()
        if self.live:
            self.live.update(self._build_table())
            self.live.stop()


# ── Per-request output (verbose) ──────────────────────────────────────


def render_outcome(name: str, outcome: ProbeOutcome) -> None:
    """Print one line per classified response."""
    hit = "[green]hit[/green]" if outcome.cache_hit else "[yellow]miss[/yellow]"
    observed = outcome.cache_header_value if outcome.cache_header_value is not None else "—"
    console.print(
        f"  [dim]{name} #{outcome.index + 1}[/dim] "
        f"Status: {outcome.status_code}  cache {hit}  "
        f"[dim]({observed})[/dim]  {outcome.elapsed_ms:.1f}ms"
    )


def render_headers(destination: Destination, headers: httpx.Headers) -> None:
    """Dump response headers; values that are not text are shown as <binary value>."""
    table = Table(
        title=f"[bold]Response Headers[/bold] [dim]{destination.name}[/dim]",
        title_style="",
        show_header=True,
        border_style="bright_black",
        expand=False,
        header_style="bold",
    )
    table.add_column("Header", style="bold")
    table.add_column("Value", overflow="fold")

    key = destination.cache_header_key.lower()
    for raw_name, raw_value in headers.raw:
        name = raw_name.decode("latin-1")
        try:
            value = Text(decode_header_value(raw_value, name))
        except HeaderDecodeFailure:
            value = Text("<binary value>", style="dim italic")
        if key and name.lower() == key:
            value.stylize("bold cyan")
        table.add_row(name, value)

    console.print(table)


# ── Destination rendering ─────────────────────────────────────────────


def _build_ladder_table(summary: DestinationSummary) -> Table:
    """Build the hit latency percentile table."""
    table = Table(
        show_header=True,
        border_style="bright_black",
        expand=False,
        pad_edge=True,
        header_style="bold",
    )
    for key in LADDER_KEYS:
        table.add_column(LADDER_LABELS[key], justify="right", min_width=8)

    values = summary.ladder.as_dict() if summary.ladder else {}
    table.add_row(*[_fmt_ms(values[k]) for k in LADDER_KEYS])
    return table


def _render_destination(summary: DestinationSummary) -> None:
    """Print the summary block for one destination."""
    console.print(f"[bold]{summary.name}[/bold] — [dim]{summary.url}[/dim]")

    if summary.status == "no_data":
        console.print("[dim italic]  no data[/dim italic]")
    else:
        ratio = _fmt_ratio(summary)
        line = Text("  Hits: ")
        line.append(f"{summary.hit_count}/{summary.total}", style="bold")
        line.append(" (")
        line.append_text(ratio)
        line.append(f")  Misses: {summary.miss_count}")
        console.print(line)

        if summary.status == "no_result":
            console.print("[dim italic]  no result[/dim italic]")
        else:
            console.print(_build_ladder_table(summary))

    if summary.failed_status is not None:
        console.print(f"  [yellow]stopped early: HTTP {summary.failed_status}[/yellow]")
    if summary.error:
        console.print(f"  [red]{summary.error}[/red]")


# ── Summary comparison table ──────────────────────────────────────────


def render_comparison(summaries: list[DestinationSummary]) -> None:
    """Render side-by-side comparison of all destinations."""
    if not summaries:
        console.print("[dim]No results to compare.[/dim]")
        return

    table = Table(
        show_header=True,
        border_style="bright_black",
        expand=False,
        pad_edge=True,
        header_style="bold",
        title="[bold]Cache Hit Latency[/bold] [dim](percentiles over hits only)[/dim]",
        title_style="",
    )
    table.add_column("#", justify="right", width=3, style="dim")
    table.add_column("Destination", style="bold", min_width=12)
    table.add_column("Hits", justify="right")
    table.add_column("Misses", justify="right")
    table.add_column("Hit %", justify="right")
    for key in LADDER_KEYS:
        table.add_column(LADDER_LABELS[key], justify="right")

    for rank, s in enumerate(summaries, 1):
        if s.ladder:
            values = s.ladder.as_dict()
            cells = [_fmt_ms(values[k]) for k in LADDER_KEYS]
        else:
            marker = "no data" if s.status == "no_data" else "no result"
            cells = [Text(marker, style="dim")] + [Text("—", style="dim")] * (len(LADDER_KEYS) - 1)

        table.add_row(
            str(rank),
            s.name,
            str(s.hit_count),
            str(s.miss_count),
            _fmt_ratio(s),
            *cells,
        )

    console.print()
    console.print(table)
    console.print()


# ── Full result rendering ─────────────────────────────────────────────


def render_full(result: FullResult) -> None:
    """Render the complete probe report."""
    for summary in result.summaries:
        console.print()
        _render_destination(summary)

    if len(result.summaries) > 1:
        render_comparison(result.summaries)


def render_presets(presets: list[CachePreset]) -> None:
    """Display the CDN vendor preset table."""
    table = Table(show_header=True, border_style="bright_black", expand=False, header_style="bold")
    table.add_column("Tag", style="bold")
    table.add_column("Vendor")
    table.add_column("Header")
    table.add_column("Hit value")
    for p in presets:
        table.add_row(f"@{p.vendor}", p.label, p.header_key, p.hit_value)
    console.print(table)


def render_error(message: str) -> None:
    """Display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")
