"""Verified account snapshots and performance analytics.

Snapshots are pulled from content-addressed mirrors, checked against the
SHA-256 digest anchored in the on-chain registry, and turned into a daily
equity curve with VAMI, drawdown and summary stats.
"""

__version__ = "0.1.0"
