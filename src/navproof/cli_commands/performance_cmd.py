from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from navproof.cli_commands.shared import make_registry, require_settings
from navproof.cli_commands.utils.formatting import create_metric_table, format_currency, format_fraction_pct, format_num
from navproof.config import Settings
from navproof.errors import NoSnapshotsError
from navproof.performance import PerformanceReport, build_equity_series, compute_performance
from navproof.snapshots.bulk import fetch_bulk_snapshots
from navproof.snapshots.loader import SnapshotLoader
from navproof.snapshots.models import VerifiedSnapshot


def load_batch(settings: Settings, source: str, start: int = 0, stop: int | None = None) -> list[VerifiedSnapshot]:
    source = source.strip().lower()
    if source == "api":
        snaps = fetch_bulk_snapshots(settings.snapshot_api_url)
    elif source == "chain":
        loader = SnapshotLoader.from_settings(settings, make_registry(settings))
        snaps = loader.load_range(start, stop)
    else:
        raise typer.BadParameter(f"Unknown source '{source}'. Expected api|chain.")
    if not snaps:
        raise NoSnapshotsError(f"No snapshots available from {source}")
    return snaps


def render_performance(console: Console, perf: PerformanceReport, tail: int = 10) -> None:
    st = perf.stats
    if perf.is_empty:
        console.print("[dim]No equity history yet.[/dim]")
        return
    console.print(
        create_metric_table(
            "Performance",
            [
                ("Since Inception", format_fraction_pct(st.since_inception)),
                ("YTD", format_fraction_pct(st.ytd)),
                ("Ann. Return", format_fraction_pct(st.annualized_return)),
                ("Ann. Vol", format_fraction_pct(st.annualized_vol)),
                ("Sharpe", format_num(st.sharpe)),
                ("Max Drawdown", f"{format_fraction_pct(st.max_drawdown)} ({st.max_drawdown_date})"),
                ("Observed days", str(st.observed_days)),
            ],
        )
    )
    t = Table(title=f"Equity curve (last updated: {perf.series[-1].date})", expand=False)
    t.add_column("Date", style="bold")
    t.add_column("Net Liq", justify="right")
    t.add_column("Return", justify="right")
    t.add_column("VAMI", justify="right")
    t.add_column("Drawdown", justify="right")
    rows = list(zip(perf.series, perf.returns, perf.wealth_index, perf.drawdown))
    for eq, r, v, dd in rows[-tail:] if tail > 0 else rows:
        t.add_row(eq.date, format_currency(eq.equity), format_fraction_pct(r.ret), format_num(v.value), format_fraction_pct(dd.drawdown))
    console.print(t)


def register(app: typer.Typer) -> None:
    @app.command("performance")
    def performance(
        source: str = typer.Option("api", "--source", help="api (bulk snapshot API) | chain (registry + mirrors)"),
        start: int = typer.Option(0, "--start", help="First registry index (chain source)."),
        stop: int = typer.Option(-1, "--stop", help="Stop before this registry index (chain source; -1 = count)."),
        tail: int = typer.Option(10, "--tail", help="Rows of the equity curve to show (0 = all)."),
    ):
        """Equity curve, VAMI, drawdown and summary stats."""
        settings = require_settings()
        c = Console()
        try:
            snaps = load_batch(settings, source, start, None if stop < 0 else stop)
        except NoSnapshotsError as e:
            c.print(f"[yellow]{e}[/yellow]")
            raise typer.Exit(code=0)
        eq = build_equity_series(snaps, tz=settings.reporting_tz)
        render_performance(c, compute_performance(eq), tail=tail)
