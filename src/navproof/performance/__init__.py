from navproof.performance.analytics import (
    DrawdownPoint,
    PerformanceReport,
    PerformanceStats,
    ReturnPoint,
    WealthIndexPoint,
    compute_performance,
)
from navproof.performance.series import EquityPoint, build_equity_series

__all__ = [
    "DrawdownPoint",
    "EquityPoint",
    "PerformanceReport",
    "PerformanceStats",
    "ReturnPoint",
    "WealthIndexPoint",
    "build_equity_series",
    "compute_performance",
]
