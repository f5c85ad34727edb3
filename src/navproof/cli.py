from __future__ import annotations

import logging

import typer

from navproof.utils.logging import setup_logging

app = typer.Typer(add_completion=False, help="Navproof CLI — verified account snapshots and performance")
registry_app = typer.Typer(add_completion=False, help="On-chain snapshot registry (read-only)")
app.add_typer(registry_app, name="registry")


@app.callback()
def _root(verbose: bool = typer.Option(False, "--verbose", "-v", help="Show mirror, retry and registry log lines on stderr.")):
    if verbose:
        setup_logging(logging.DEBUG)


_COMMANDS_REGISTERED = False


def _register_commands() -> None:
    global _COMMANDS_REGISTERED
    if _COMMANDS_REGISTERED:
        return
    # Import here to keep `navproof.cli` lightweight at import time.
    from navproof.cli_commands.overview_cmd import register as register_overview
    from navproof.cli_commands.performance_cmd import register as register_performance
    from navproof.cli_commands.registry_cmd import register as register_registry
    from navproof.cli_commands.verify_cmd import register as register_verify

    register_registry(registry_app)
    register_verify(app)
    register_overview(app)
    register_performance(app)
    _COMMANDS_REGISTERED = True


def main():
    _register_commands()
    app()

# Register commands when imported as a console-script entrypoint (`pyproject.toml` uses `navproof.cli:app`).
_register_commands()


if __name__ == "__main__":
    main()
