"""
Pytest configuration and shared fixtures for navproof tests.

Usage:
    @pytest.fixture functions are automatically available to all tests.
    Import helpers from conftest when needed.
"""
import hashlib
import json
import sys
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest


def pytest_configure():
    """
    Ensure `src/` is on sys.path for the src-layout package import (`navproof`).
    This keeps tests runnable without requiring an editable install.
    """
    root = Path(__file__).resolve().parents[1]
    src = root / "src"
    if src.exists():
        sys.path.insert(0, str(src))


# =============================================================================
# Snapshot record helpers
# =============================================================================

def make_record(
    as_of_utc: str = "2024-01-02T21:05:00Z",
    net_liq: Any = 100000.0,
    account_id: str = "U1234567",
    positions: list[dict] | None = None,
    **extra: Any,
) -> dict:
    """
    Build a snapshot record the way the upstream producer shapes it.

    Usage:
        rec = make_record(as_of_utc="2024-02-01T21:00:00Z", net_liq=500)
    """
    rec = {
        "as_of_utc": as_of_utc,
        "payload": {
            "accounts": {
                "All": {
                    "NetLiquidation": {"value": net_liq},
                    "UnrealizedPnL": {"value": 1250.5},
                    "RealizedPnL": {"value": -40.0},
                },
                account_id: {
                    "NetLiquidation": {"value": net_liq},
                    "TotalCashValue": {"value": 25000.0},
                    "BuyingPower": {"value": 50000.0},
                },
            },
            "positions": positions if positions is not None else [],
        },
    }
    rec.update(extra)
    return rec


def record_bytes(rec: dict, *, indent: int | None = 2) -> bytes:
    return json.dumps(rec, indent=indent).encode("utf-8")


def sha(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def make_response(status: int = 200, content: bytes = b"{}", json_body: Any = None) -> MagicMock:
    """Mock `requests.Response` with the attributes the clients read."""
    resp = MagicMock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.content = content
    if json_body is not None:
        resp.json.return_value = json_body
    else:
        resp.json.side_effect = lambda: json.loads(content.decode("utf-8"))
    if not resp.ok:
        import requests

        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} Error")
    return resp


@pytest.fixture
def sample_record() -> dict:
    return make_record(
        positions=[
            {"symbol": "SPY", "secType": "STK", "position": 100, "avgPrice": 440.0, "lastPrice": 450.0, "pctChange": 0.4, "unrealizedPnL": 1000.0},
            {
                "symbol": "SPY",
                "secType": "OPT",
                "position": 2,
                "avgPrice": 2.0,
                "lastPrice": 2.5,
                "pctChange": 25.0,
                "unrealizedPnL": 100.0,
                "expiry": "20250117",
                "strike": 480.0,
                "right": "C",
            },
        ],
        account_base_ccy="USD",
    )
