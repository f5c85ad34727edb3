"""
Performance analytics over a daily equity curve.

- daily simple returns (first observation has no prior, so its return is 0)
- VAMI wealth index: 1000 on the first date, compounding daily returns
- drawdown from the running peak of the wealth index
- summary stats over observed returns (first synthetic 0 excluded):
  annualized return/vol on a 252-day year, Sharpe (rf = 0), since-inception, YTD
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from typing import Sequence

import pandas as pd

from navproof.performance.series import EquityPoint
from navproof.utils.dates import today_in

TRADING_DAYS = 252
VAMI_BASE = 1000.0


@dataclass(frozen=True)
class ReturnPoint:
    date: str
    ret: float


@dataclass(frozen=True)
class WealthIndexPoint:
    date: str
    value: float


@dataclass(frozen=True)
class DrawdownPoint:
    date: str
    drawdown: float


@dataclass(frozen=True)
class PerformanceStats:
    since_inception: float = 0.0
    annualized_return: float = 0.0
    annualized_vol: float = 0.0
    sharpe: float = 0.0
    max_drawdown: float = 0.0
    max_drawdown_date: str | None = None
    ytd: float | None = None
    observed_days: int = 0

    @property
    def is_empty(self) -> bool:
        return self.max_drawdown_date is None


@dataclass(frozen=True)
class PerformanceReport:
    series: list[EquityPoint] = field(default_factory=list)
    returns: list[ReturnPoint] = field(default_factory=list)
    wealth_index: list[WealthIndexPoint] = field(default_factory=list)
    drawdown: list[DrawdownPoint] = field(default_factory=list)
    stats: PerformanceStats = field(default_factory=PerformanceStats)

    @property
    def is_empty(self) -> bool:
        return not self.series


def _ytd(eq: pd.Series, year: int) -> float | None:
    in_year = [i for i, d in enumerate(eq.index) if int(d[:4]) == year]
    if not in_year:
        return None
    first = in_year[0]
    base = float(eq.iloc[first - 1]) if first > 0 else float(eq.iloc[0])
    return float(eq.iloc[-1]) / base - 1.0


def compute_performance(series: Sequence[EquityPoint], *, today: date | None = None) -> PerformanceReport:
    """
    Returns, wealth index, drawdown and stats for an equity curve.

    ``today`` anchors the YTD window (defaults to today in New York).
    Empty input yields an empty report whose stats are all zero (``stats.is_empty``).
    """
    if not series:
        return PerformanceReport()

    s = sorted(series, key=lambda p: p.date)
    dates = [p.date for p in s]
    eq = pd.Series([float(p.equity) for p in s], index=dates, dtype="float64")

    # --- daily returns ---
    rets = (eq / eq.shift(1) - 1.0).fillna(0.0)
    rets.iloc[0] = 0.0

    # --- VAMI: index[i] = index[i-1] * (1 + ret[i]) ---
    growth = 1.0 + rets
    growth.iloc[0] = VAMI_BASE
    vami = growth.cumprod()

    # --- drawdown from running peak (peak includes the current point) ---
    peak = vami.cummax()
    dd = vami / peak - 1.0
    max_dd_pos = int(dd.reset_index(drop=True).idxmin())  # first occurrence on ties
    max_dd = float(dd.iloc[max_dd_pos])

    # --- stats ---
    obs = rets.iloc[1:]
    n = int(len(obs))
    if n > 0:
        avg = float(obs.mean())
        # population std; identical returns are exactly zero vol
        std = 0.0 if float(obs.max()) == float(obs.min()) else float(obs.std(ddof=0))
    else:
        avg, std = 0.0, 0.0
    vol_ann = std * math.sqrt(TRADING_DAYS)

    first, last = float(eq.iloc[0]), float(eq.iloc[-1])
    ret_ann = (last / first) ** (TRADING_DAYS / n) - 1.0 if n > 0 else 0.0
    sharpe = (avg * TRADING_DAYS) / vol_ann if vol_ann > 0 else 0.0

    year = (today or today_in()).year
    stats = PerformanceStats(
        since_inception=last / first - 1.0,
        annualized_return=ret_ann,
        annualized_vol=vol_ann,
        sharpe=sharpe,
        max_drawdown=max_dd,
        max_drawdown_date=dates[max_dd_pos],
        ytd=_ytd(eq, year),
        observed_days=n,
    )

    return PerformanceReport(
        series=s,
        returns=[ReturnPoint(d, float(r)) for d, r in zip(dates, rets)],
        wealth_index=[WealthIndexPoint(d, float(v)) for d, v in zip(dates, vami)],
        drawdown=[DrawdownPoint(d, float(x)) for d, x in zip(dates, dd)],
        stats=stats,
    )
