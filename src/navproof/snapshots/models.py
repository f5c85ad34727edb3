from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator, Mapping

from navproof.utils.dates import parse_timestamp_or_none

AGGREGATE_ACCOUNT = "All"


def _to_float(x: Any) -> float | None:
    try:
        if x is None or isinstance(x, bool):
            return None
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if v == v else None


@dataclass(frozen=True)
class VerifiedSnapshot:
    """One snapshot record, as fetched and checked. Immutable once built."""

    content_pointer: str | None
    expected_hash: str | None
    timestamp_millis: int
    payload: dict[str, Any]
    verified: bool

    @property
    def record(self) -> SnapshotRecord:
        return SnapshotRecord.from_json(self.payload)


@dataclass(frozen=True)
class AccountMetrics:
    """Account tags as reported by the broker: tag -> {"value": ...}."""

    account_id: str
    tags: Mapping[str, Any] = field(default_factory=dict)

    def value(self, tag: str) -> float | None:
        entry = self.tags.get(tag)
        if isinstance(entry, Mapping):
            entry = entry.get("value")
        return _to_float(entry)

    def value_or_zero(self, tag: str) -> float:
        v = self.value(tag)
        return 0.0 if v is None else v

    @property
    def net_liquidation(self) -> float:
        return self.value_or_zero("NetLiquidation")


@dataclass(frozen=True)
class AccountMap:
    """
    Per-account metrics keyed by account id.

    The aggregate "All" entry is reserved: it is always available through
    ``aggregate`` (empty when the producer omitted it) and never shows up
    among ``accounts``.
    """

    aggregate: AccountMetrics
    accounts: dict[str, AccountMetrics]

    @classmethod
    def from_json(cls, raw: Any) -> AccountMap:
        raw = raw if isinstance(raw, Mapping) else {}
        agg_tags = raw.get(AGGREGATE_ACCOUNT)
        aggregate = AccountMetrics(AGGREGATE_ACCOUNT, agg_tags if isinstance(agg_tags, Mapping) else {})
        accounts = {
            str(k): AccountMetrics(str(k), v if isinstance(v, Mapping) else {})
            for k, v in raw.items()
            if k != AGGREGATE_ACCOUNT
        }
        return cls(aggregate=aggregate, accounts=accounts)

    @property
    def primary(self) -> AccountMetrics | None:
        """First non-aggregate account in producer order."""
        return next(iter(self.accounts.values()), None)

    def __iter__(self) -> Iterator[str]:
        return iter(self.accounts)

    def __len__(self) -> int:
        return len(self.accounts)


@dataclass(frozen=True)
class Position:
    symbol: str
    sec_type: str
    position: float | None
    avg_price: float | None
    last_price: float | None
    pct_change: float | None
    unrealized_pnl: float | None
    expiry: str | None = None
    strike: float | None = None
    right: str | None = None

    @classmethod
    def from_json(cls, raw: Mapping[str, Any]) -> Position:
        def _s(k: str) -> str | None:
            v = raw.get(k)
            return None if v is None else str(v)

        return cls(
            symbol=str(raw.get("symbol") or ""),
            sec_type=str(raw.get("secType") or ""),
            position=_to_float(raw.get("position")),
            avg_price=_to_float(raw.get("avgPrice")),
            last_price=_to_float(raw.get("lastPrice")),
            pct_change=_to_float(raw.get("pctChange")),
            unrealized_pnl=_to_float(raw.get("unrealizedPnL")),
            expiry=_s("expiry"),
            strike=_to_float(raw.get("strike")),
            right=_s("right"),
        )

    @property
    def label(self) -> str:
        if self.sec_type != "OPT":
            return self.symbol
        strike = "" if self.strike is None else f"{self.strike:g}"
        right = (self.right or "")[:1]
        return " ".join(p for p in (self.symbol, self.expiry or "", strike, right) if p)


@dataclass(frozen=True)
class SnapshotRecord:
    """Typed view over the producer's snapshot JSON."""

    sha256: str | None
    as_of_utc: datetime | None
    as_of_raw: str | None
    base_currency: str
    accounts: AccountMap
    positions: list[Position]

    @classmethod
    def from_json(cls, raw: Mapping[str, Any] | None) -> SnapshotRecord:
        raw = raw if isinstance(raw, Mapping) else {}
        payload = raw.get("payload")
        payload = payload if isinstance(payload, Mapping) else {}
        meta = raw.get("meta")
        meta = meta if isinstance(meta, Mapping) else {}
        as_of = raw.get("as_of_utc")
        positions = payload.get("positions")
        return cls(
            sha256=raw.get("sha256") if isinstance(raw.get("sha256"), str) else None,
            as_of_utc=parse_timestamp_or_none(as_of),
            as_of_raw=as_of if isinstance(as_of, str) else None,
            base_currency=str(raw.get("account_base_ccy") or meta.get("currency") or "USD"),
            accounts=AccountMap.from_json(payload.get("accounts")),
            positions=[Position.from_json(p) for p in positions if isinstance(p, Mapping)]
            if isinstance(positions, list)
            else [],
        )

    @property
    def net_liquidation(self) -> float:
        acct = self.accounts.primary
        return acct.net_liquidation if acct is not None else 0.0
