"""
Latest-snapshot account overview: the bulk API's newest record checked
against the digest the registry anchored last.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from navproof.registry.reader import SnapshotDescriptor
from navproof.snapshots.models import Position, SnapshotRecord, VerifiedSnapshot
from navproof.utils.dates import from_seconds, local_timestamp, trading_day
from navproof.verify.digest import digests_equal, is_zero_digest

# (label, account scope, tag) in display order.
KPI_TAGS: tuple[tuple[str, str, str], ...] = (
    ("Net Liquidation", "primary", "NetLiquidation"),
    ("Total Cash", "primary", "TotalCashValue"),
    ("Buying Power", "primary", "BuyingPower"),
    ("Unrealized PnL (All)", "aggregate", "UnrealizedPnL"),
    ("Realized PnL (All)", "aggregate", "RealizedPnL"),
)


@dataclass(frozen=True)
class Kpi:
    label: str
    value: float | None


@dataclass(frozen=True)
class AccountOverview:
    verified: bool
    trading_day: str
    as_of_utc: str
    as_of_local: str
    onchain_hash: str | None
    onchain_time: str
    record_hash: str | None
    base_currency: str
    account_id: str | None
    kpis: list[Kpi] = field(default_factory=list)
    positions: list[Position] = field(default_factory=list)


def build_overview(
    latest: VerifiedSnapshot | None,
    onchain: SnapshotDescriptor | None,
    *,
    tz: str = "America/New_York",
) -> AccountOverview | None:
    """
    Summarize the newest snapshot. Returns None when nothing has been anchored yet.

    ``verified`` is True only if the record's digest equals the registry digest.
    """
    if onchain is None or is_zero_digest(onchain.expected_hash):
        return None

    record = SnapshotRecord.from_json(latest.payload if latest is not None else None)
    record_hash = (latest.expected_hash if latest is not None else None) or record.sha256
    primary = record.accounts.primary

    kpis: list[Kpi] = []
    for label, scope, tag in KPI_TAGS:
        acct = primary if scope == "primary" else record.accounts.aggregate
        kpis.append(Kpi(label=label, value=acct.value(tag) if acct is not None else None))

    onchain_time = (
        from_seconds(onchain.timestamp_seconds).isoformat() if onchain.timestamp_seconds else "n/a"
    )
    as_of_raw = record.as_of_raw or "n/a"
    return AccountOverview(
        verified=digests_equal(record_hash, onchain.expected_hash),
        trading_day=trading_day(record.as_of_utc, tz) if record.as_of_utc else "n/a",
        as_of_utc=as_of_raw,
        as_of_local=local_timestamp(record.as_of_utc, tz),
        onchain_hash=onchain.expected_hash,
        onchain_time=onchain_time,
        record_hash=record_hash,
        base_currency=record.base_currency,
        account_id=primary.account_id if primary is not None else None,
        kpis=kpis,
        positions=list(record.positions),
    )


def latest_of(snapshots: Sequence[VerifiedSnapshot]) -> VerifiedSnapshot | None:
    return snapshots[-1] if snapshots else None
