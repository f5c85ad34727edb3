from __future__ import annotations

import json
import logging
from dataclasses import fields, is_dataclass
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

console = Console()

# Audit events (verify results, unavailable snapshots) also go to this logger,
# so a file handler attached by the caller keeps a trail of every check.
event_logger = logging.getLogger("navproof.events")


def setup_logging(level: int = logging.WARNING) -> None:
    """Route the package loggers (gateway, loader, registry, bulk) to stderr via rich."""
    root = logging.getLogger("navproof")
    root.setLevel(level)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(RichHandler(console=Console(stderr=True), show_path=False, rich_tracebacks=False))


def _to_jsonable(x: Any) -> Any:
    if isinstance(x, Enum):
        return x.value
    if isinstance(x, BaseException):
        return f"{type(x).__name__}: {x}"
    if isinstance(x, bytes):
        return x.hex()
    if isinstance(x, (datetime, date)):
        return x.isoformat()
    if is_dataclass(x) and not isinstance(x, type):
        # field by field: asdict() would copy enums and errors through untouched
        return {f.name: _to_jsonable(getattr(x, f.name)) for f in fields(x)}
    if hasattr(x, "model_dump"):
        return _to_jsonable(x.model_dump())
    if isinstance(x, dict):
        return {str(k): _to_jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_to_jsonable(v) for v in x]
    return x


def event_record(event: str, payload: dict[str, Any], *, now: datetime | None = None) -> dict[str, Any]:
    ts = (now or datetime.now(timezone.utc)).isoformat()
    return {"event": event, "logged_at": ts, **_to_jsonable(payload)}


def log_event(event: str, payload: dict[str, Any], *, out: Console | None = None) -> dict[str, Any]:
    """
    Print one audit event as pretty JSON and mirror it to ``navproof.events``.

    Returns the record that was emitted.
    """
    rec = event_record(event, payload)
    text = json.dumps(rec, default=str, ensure_ascii=False)
    c = out or console
    c.print(f"[bold]{event}[/bold]")
    c.print_json(text)
    event_logger.info(text)
    return rec
