from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from navproof.cli_commands.shared import make_registry, require_settings
from navproof.cli_commands.utils.formatting import create_metric_table
from navproof.snapshots.loader import Exhausted, SnapshotLoader, Success
from navproof.utils.logging import log_event


def register(app: typer.Typer) -> None:
    @app.command("verify")
    def verify(
        index: int = typer.Argument(..., help="Snapshot index (0-based)"),
        as_json: bool = typer.Option(False, "--json", help="Print the load report as a JSON event."),
    ):
        """Fetch one snapshot from the mirrors and check it against the registry digest."""
        settings = require_settings()
        loader = SnapshotLoader.from_settings(settings, make_registry(settings))
        report = loader.load_with_report(index)
        c = Console()

        if report.registry_error is not None:
            c.print(Panel(f"Registry read failed: {report.registry_error}", title=f"Snapshot #{index}", expand=False))
            raise typer.Exit(code=1)

        final = report.final
        if isinstance(final, Exhausted):
            if as_json:
                log_event("snapshot_unavailable", {"index": index, "attempts": final.attempts, "errors": final.errors})
            else:
                c.print(
                    Panel(
                        f"Unavailable after {final.attempts} attempt(s)\nlast error: {final.last_error}",
                        title=f"Snapshot #{index}",
                        expand=False,
                    )
                )
            raise typer.Exit(code=2)

        if not isinstance(final, Success):
            c.print(f"[red]Unexpected load outcome for snapshot #{index}: {final!r}[/red]")
            raise typer.Exit(code=1)
        r = final.result
        if as_json:
            log_event(
                "snapshot_verified" if r.ok else "snapshot_mismatch",
                {
                    "index": index,
                    "ok": r.ok,
                    "mode": r.mode,
                    "attempts": report.attempts,
                    "source_url": r.source_url,
                    "sha256_onchain": r.expected_digest,
                    "sha256_embedded": r.embedded_digest,
                    "sha256_file": r.raw_digest,
                    "sha256_canonical": r.canonical_digest,
                },
            )
            return

        status = "[green]✅ Verified[/green]" if r.ok else "[red]❌ Unverified[/red]"
        c.print(
            create_metric_table(
                f"Snapshot #{index}",
                [
                    ("Status", status),
                    ("Mode", r.mode.value),
                    ("Source", r.source_url or "—"),
                    ("Attempts", str(report.attempts)),
                    ("Expected (on-chain)", r.expected_digest or "—"),
                    ("Embedded sha256", r.embedded_digest or "—"),
                    ("File bytes sha256", r.raw_digest),
                    ("Canonical sha256", r.canonical_digest),
                ],
            )
        )
