from __future__ import annotations

from conftest import make_record
from navproof.performance.series import EquityPoint, build_equity_series
from navproof.snapshots.models import VerifiedSnapshot


def _snap(rec: dict) -> VerifiedSnapshot:
    return VerifiedSnapshot(content_pointer=None, expected_hash=None, timestamp_millis=0, payload=rec, verified=True)


def test_trading_day_is_new_york_date_of_as_of_instant():
    # 03:00 UTC on Feb 2 is still Feb 1 in New York.
    pts = build_equity_series([_snap(make_record("2024-02-02T03:00:00Z", 500.0))])
    assert pts == [EquityPoint("2024-02-01", 500.0)]


def test_later_snapshot_wins_for_same_day():
    snaps = [
        _snap(make_record("2024-02-01T21:00:00Z", 500)),
        _snap(make_record("2024-02-02T01:30:00Z", 600)),
    ]
    assert build_equity_series(snaps) == [EquityPoint("2024-02-01", 600.0)]


def test_dedup_follows_input_order_not_value():
    snaps = [
        _snap(make_record("2024-02-01T21:00:00Z", 900)),
        _snap(make_record("2024-02-01T22:00:00Z", 100)),
    ]
    assert build_equity_series(snaps) == [EquityPoint("2024-02-01", 100.0)]


def test_sorted_ascending_and_non_positive_dropped():
    snaps = [
        _snap(make_record("2024-01-05T21:00:00Z", 103)),
        _snap(make_record("2024-01-03T21:00:00Z", 101)),
        _snap(make_record("2024-01-04T21:00:00Z", 0)),
        _snap(make_record("2024-01-08T21:00:00Z", -5)),
        _snap(make_record("2024-01-02T21:00:00Z", "100.5")),
    ]
    pts = build_equity_series(snaps)
    assert [p.date for p in pts] == ["2024-01-02", "2024-01-03", "2024-01-05"]
    assert pts[0].equity == 100.5


def test_uses_non_aggregate_account_and_defaults_to_zero():
    rec = make_record("2024-01-02T21:00:00Z", 100)
    rec["payload"]["accounts"]["All"]["NetLiquidation"]["value"] = 999999
    assert build_equity_series([_snap(rec)]) == [EquityPoint("2024-01-02", 100.0)]

    broken = make_record("2024-01-03T21:00:00Z", "n/a")
    only_all = {"as_of_utc": "2024-01-04T21:00:00Z", "payload": {"accounts": {"All": {"NetLiquidation": {"value": 5}}}}}
    assert build_equity_series([_snap(broken), _snap(only_all)]) == []


def test_strictly_ascending_unique_dates():
    snaps = [_snap(make_record(f"2024-03-{d:02d}T21:00:00Z", 100 + d)) for d in (5, 1, 5, 3, 1)]
    dates = [p.date for p in build_equity_series(snaps)]
    assert dates == sorted(set(dates))
