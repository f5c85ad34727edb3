from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from navproof.snapshots.models import SnapshotRecord, VerifiedSnapshot
from navproof.utils.dates import trading_day


@dataclass(frozen=True)
class EquityPoint:
    date: str  # YYYY-MM-DD in the reporting zone
    equity: float


def build_equity_series(
    snapshots: Iterable[VerifiedSnapshot],
    *,
    tz: str = "America/New_York",
) -> list[EquityPoint]:
    """
    Daily equity curve from a batch of snapshots.

    - date: trading day of the record's ``as_of_utc`` in ``tz`` (records are
      stamped after the prior session's close)
    - equity: NetLiquidation of the first non-aggregate account, 0 if missing
    - non-positive equity is dropped
    - one point per date; a later snapshot in input order replaces an earlier one
    """
    by_date: dict[str, EquityPoint] = {}
    for snap in snapshots:
        record = SnapshotRecord.from_json(snap.payload)
        equity = record.net_liquidation
        if not equity > 0:
            continue
        day = trading_day(record.as_of_utc, tz)
        by_date[day] = EquityPoint(date=day, equity=equity)
    return sorted(by_date.values(), key=lambda p: p.date)
