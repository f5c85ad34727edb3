"""Command registrations for the Typer CLI.

`navproof/cli.py` stays the entrypoint module (pyproject scripts point at
`navproof.cli:app`); commands live in this package and are registered from
the entrypoint.
"""
