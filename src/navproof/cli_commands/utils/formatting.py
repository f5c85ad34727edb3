"""
CLI formatting utilities - centralized color/table/display helpers.
"""
from __future__ import annotations

from typing import Any

from rich.table import Table


def color_for_pnl(value: float | None) -> str:
    """Get color for P&L."""
    if value is None:
        return "dim"
    if value > 0:
        return "green"
    elif value < 0:
        return "red"
    return "white"


def format_currency(value: Any, decimals: int = 2, ccy: str = "") -> str:
    """Format a currency value; "—" when missing or not numeric."""
    if not isinstance(value, (int, float)):
        return "—"
    s = f"${value:,.{decimals}f}" if value >= 0 else f"-${-value:,.{decimals}f}"
    return f"{s} {ccy}".rstrip()


def format_fraction_pct(value: float | None, decimals: int = 2) -> str:
    """Format a fraction (0.1 -> 10.00%)."""
    if value is None:
        return "—"
    return f"{value * 100:.{decimals}f}%"


def format_num(value: Any, decimals: int = 2) -> str:
    if not isinstance(value, (int, float)):
        return "—"
    return f"{value:.{decimals}f}"


def create_metric_table(title: str, rows: list[tuple[str, str]], expand: bool = False) -> Table:
    """
    Create a simple two-column metric table.

    Args:
        title: Table title
        rows: List of (metric_name, value) tuples
        expand: Whether to expand the table to full width
    """
    table = Table(title=title, expand=expand, show_header=False)
    table.add_column("Metric", style="bold")
    table.add_column("Value", justify="right")

    for metric, value in rows:
        table.add_row(metric, value)

    return table
