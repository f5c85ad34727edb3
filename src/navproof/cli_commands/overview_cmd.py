from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from navproof.cli_commands.shared import make_registry, registry_call, require_settings
from navproof.cli_commands.utils.formatting import color_for_pnl, create_metric_table, format_currency, format_num
from navproof.overview import AccountOverview, build_overview, latest_of
from navproof.snapshots.bulk import fetch_bulk_snapshots


def _positions_table(ov: AccountOverview) -> Table:
    t = Table(title="Positions", expand=False)
    t.add_column("Symbol", style="bold")
    t.add_column("Type")
    t.add_column("Qty", justify="right")
    t.add_column("Avg", justify="right")
    t.add_column("Last", justify="right")
    t.add_column("% Chg", justify="right")
    t.add_column("PnL", justify="right")
    for p in ov.positions:
        pnl = format_currency(p.unrealized_pnl, ccy=ov.base_currency)
        t.add_row(
            p.label,
            p.sec_type,
            format_num(p.position, 0),
            format_num(p.avg_price),
            format_num(p.last_price),
            "—" if p.pct_change is None else f"{p.pct_change}%",
            f"[{color_for_pnl(p.unrealized_pnl)}]{pnl}[/{color_for_pnl(p.unrealized_pnl)}]",
        )
    return t


def render_overview(console: Console, ov: AccountOverview) -> None:
    badge = "[green]Verified[/green]" if ov.verified else "[red]Unverified[/red]"
    console.print(Panel(f"{badge}\nAs of {ov.trading_day} Close", title="Account overview", expand=False))
    console.print(
        create_metric_table(
            f"Account {ov.account_id or '—'} ({ov.base_currency})",
            [(k.label, format_currency(k.value)) for k in ov.kpis],
        )
    )
    if ov.positions:
        console.print(_positions_table(ov))
    else:
        console.print("[dim]No open positions[/dim]")
    console.print(
        create_metric_table(
            "Verification details",
            [
                ("On-chain ts (block time)", ov.onchain_time),
                ("Snapshot recorded (UTC)", ov.as_of_utc),
                ("Snapshot recorded (local)", ov.as_of_local),
                ("Expected (on-chain)", ov.onchain_hash or "—"),
                ("From snapshot API", ov.record_hash or "n/a"),
                ("Verification", "✅ Match" if ov.verified else "❌ Mismatch"),
            ],
        )
    )


def register(app: typer.Typer) -> None:
    @app.command("overview")
    def overview():
        """Latest snapshot (bulk API) checked against the latest on-chain digest."""
        settings = require_settings()
        reg = make_registry(settings)
        c = Console()
        if registry_call(reg.count) == 0:
            c.print("No snapshots on-chain yet.")
            return
        onchain = registry_call(reg.latest)
        latest = latest_of(fetch_bulk_snapshots(settings.snapshot_api_url))
        ov = build_overview(latest, onchain, tz=settings.reporting_tz)
        if ov is None:
            c.print("Latest registry entry is not anchored yet.")
            return
        render_overview(c, ov)
