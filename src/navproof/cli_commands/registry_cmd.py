from __future__ import annotations

import typer
from rich.console import Console

from navproof.cli_commands.shared import make_registry, registry_call, require_settings
from navproof.cli_commands.utils.formatting import create_metric_table
from navproof.registry.reader import SnapshotDescriptor
from navproof.utils.dates import from_seconds


def _descriptor_rows(d: SnapshotDescriptor) -> list[tuple[str, str]]:
    return [
        ("Content pointer", d.content_pointer or "—"),
        ("sha256 (on-chain)", d.expected_hash or "—"),
        ("Anchored", "yes" if d.is_anchored else "no (zero digest)"),
        ("Block time (UTC)", from_seconds(d.timestamp_seconds).isoformat() if d.timestamp_seconds else "n/a"),
    ]


def register(registry_app: typer.Typer) -> None:
    @registry_app.command("count")
    def registry_count():
        """Number of snapshots anchored in the registry."""
        reg = make_registry(require_settings())
        Console().print(f"Snapshots on-chain: [bold]{registry_call(reg.count)}[/bold]")

    @registry_app.command("show")
    def registry_show(index: int = typer.Argument(..., help="Snapshot index (0-based)")):
        """Show the registry entry for one snapshot index."""
        reg = make_registry(require_settings())
        Console().print(create_metric_table(f"Registry entry #{index}", _descriptor_rows(registry_call(reg.by_index, index))))

    @registry_app.command("latest")
    def registry_latest():
        """Show the most recently anchored registry entry."""
        reg = make_registry(require_settings())
        c = Console()
        n = registry_call(reg.count)
        if n == 0:
            c.print("No snapshots on-chain yet.")
            return
        c.print(create_metric_table(f"Registry entry #{n - 1} (latest)", _descriptor_rows(registry_call(reg.latest))))
