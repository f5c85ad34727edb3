"""Bulk snapshot channel: the SQLite-backed API that mirrors every pinned record."""
from __future__ import annotations

import logging
from typing import Any

import requests
from requests.exceptions import RequestException

from navproof.snapshots.models import VerifiedSnapshot
from navproof.utils.dates import parse_timestamp_or_none, to_millis

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://127.0.0.1:8000/snapshots"


def _row_to_snapshot(row: Any) -> VerifiedSnapshot | None:
    if not isinstance(row, dict):
        return None
    data = row.get("data")
    if not isinstance(data, dict):
        return None
    as_of = parse_timestamp_or_none(row.get("as_of_utc"))
    sha = row.get("sha256")
    return VerifiedSnapshot(
        content_pointer=None,
        expected_hash=str(sha) if sha else None,
        timestamp_millis=to_millis(as_of) if as_of is not None else 0,
        payload=data,
        # Controlled channel, not a public mirror.
        verified=True,
    )


def fetch_bulk_snapshots(api_url: str | None = None, *, timeout: float = 30.0) -> list[VerifiedSnapshot]:
    """
    Fetch every snapshot from the bulk API, in server order.

    Any failure degrades to an empty list.
    """
    url = api_url or DEFAULT_API_URL
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        rows = resp.json()
    except (RequestException, ValueError) as e:
        logger.error("fetch_bulk_snapshots error: %s", e)
        return []
    if not isinstance(rows, list):
        logger.error("fetch_bulk_snapshots: expected a JSON list, got %s", type(rows).__name__)
        return []

    out: list[VerifiedSnapshot] = []
    for row in rows:
        snap = _row_to_snapshot(row)
        if snap is None:
            logger.debug("Skipping malformed bulk row: %r", row)
            continue
        out.append(snap)
    return out
