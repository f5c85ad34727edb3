from __future__ import annotations

from typing import Any, Callable, TypeVar

import typer
from rich.console import Console

from navproof.config import Settings
from navproof.registry.reader import Web3RegistryReader
from navproof.utils.settings import safe_load_settings

T = TypeVar("T")


def require_settings() -> Settings:
    settings = safe_load_settings()
    if settings is None:
        Console().print("[red]Could not load settings (.env / environment).[/red]")
        raise typer.Exit(code=1)
    return settings


def make_registry(settings: Settings) -> Web3RegistryReader:
    try:
        return Web3RegistryReader.from_settings(settings)
    except ValueError as e:
        Console().print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)


def registry_call(fn: Callable[..., T], *args: Any) -> T:
    """Run one registry read; RPC/contract failures end the command with exit 1."""
    try:
        return fn(*args)
    except Exception as e:
        Console().print(f"[red]Registry read failed: {e}[/red]")
        raise typer.Exit(code=1)
