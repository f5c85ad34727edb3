from __future__ import annotations

from unittest.mock import MagicMock, patch

from conftest import make_record, make_response, record_bytes, sha
from navproof.data.gateway import GatewayFetcher, MirrorResponse
from navproof.errors import AllMirrorsExhaustedError, FormatError, NetworkError
from navproof.registry.reader import SnapshotDescriptor, StaticRegistryReader
from navproof.snapshots.loader import Exhausted, Retryable, SnapshotLoader, Success
from navproof.verify.digest import VerificationMode, canonical_digest, verify_snapshot_bytes

ZERO = "0x" + "0" * 64


def _registry(*descs: SnapshotDescriptor) -> StaticRegistryReader:
    return StaticRegistryReader(list(descs))


def _fetcher(*effects) -> MagicMock:
    f = MagicMock(spec=GatewayFetcher)
    f.fetch.side_effect = list(effects)
    return f


def test_load_verified_against_registry():
    content = record_bytes(make_record())
    reg = _registry(SnapshotDescriptor("cid0", "0x" + sha(content), 1704230000))
    loader = SnapshotLoader(reg, _fetcher(MirrorResponse("https://m1/cid0", content)))

    snap = loader.load(0)
    assert snap is not None
    assert snap.verified is True
    assert snap.content_pointer == "cid0"
    assert snap.timestamp_millis == 1704230000 * 1000
    assert snap.payload["payload"]["accounts"]["U1234567"]["NetLiquidation"]["value"] == 100000.0


def test_mismatch_is_a_successful_fetch_with_negative_result():
    content = record_bytes(make_record())
    fetcher = _fetcher(MirrorResponse("https://m1/cid0", content))
    loader = SnapshotLoader(_registry(SnapshotDescriptor("cid0", "0x" + "ab" * 32, 1)), fetcher)

    report = loader.load_with_report(0)
    assert isinstance(report.final, Success)
    assert report.attempts == 1
    assert report.snapshot is not None and report.snapshot.verified is False
    assert fetcher.fetch.call_count == 1


def test_zero_registry_digest_verifies_with_no_expected_digest():
    rec = make_record()
    rec["sha256"] = canonical_digest(rec)
    content = record_bytes(rec)
    loader = SnapshotLoader(
        _registry(SnapshotDescriptor("cid0", ZERO, 1)),
        _fetcher(MirrorResponse("https://m1/cid0", content)),
    )
    with patch("navproof.snapshots.loader.verify_snapshot_bytes", wraps=verify_snapshot_bytes) as verify:
        report = loader.load_with_report(0)
    assert verify.call_args.args[1] is None
    assert report.final.result.mode == VerificationMode.EMBEDDED_CANONICAL
    assert report.snapshot.verified is True


def test_retries_after_faults_then_succeeds():
    content = record_bytes(make_record())
    fetcher = _fetcher(
        AllMirrorsExhaustedError("cid0", [NetworkError("m1 -> 502")]),
        MirrorResponse("https://m2/cid0", b"{truncated"),
        MirrorResponse("https://m3/cid0", content),
    )
    loader = SnapshotLoader(_registry(SnapshotDescriptor("cid0", "0x" + sha(content), 1)), fetcher)
    report = loader.load_with_report(0)

    assert [type(o) for o in report.outcomes] == [Retryable, Retryable, Success]
    assert isinstance(report.errors[1], FormatError)
    assert report.snapshot.verified is True


def test_all_mirrors_fail_on_every_attempt_returns_none():
    reg = _registry(SnapshotDescriptor("cid0", "0x" + "ab" * 32, 1))
    with patch("navproof.data.gateway.requests.get", return_value=make_response(503)) as get:
        loader = SnapshotLoader(reg, GatewayFetcher())
        report = loader.load_with_report(0)
        assert loader.load(0) is None

    assert isinstance(report.final, Exhausted)
    assert report.final.attempts == 3
    assert all(isinstance(e, AllMirrorsExhaustedError) for e in report.final.errors)
    # 3 attempts x 3 mirrors per load, two loads
    assert get.call_count == 18
    assert report.snapshot is None


def test_registry_failure_is_soft():
    loader = SnapshotLoader(_registry(), _fetcher())
    report = loader.load_with_report(5)
    assert isinstance(report.registry_error, IndexError)
    assert loader.load(5) is None


def test_custom_attempt_budget():
    fetcher = _fetcher(*[NetworkError("down")] * 5)
    loader = SnapshotLoader(_registry(SnapshotDescriptor("cid0", None, 1)), fetcher, max_attempts=5)
    assert loader.load(0) is None
    assert fetcher.fetch.call_count == 5


def test_load_latest_and_range_skip_unavailable():
    good = record_bytes(make_record())
    descs = [
        SnapshotDescriptor("cid0", "0x" + sha(good), 1),
        SnapshotDescriptor("cid1", None, 2),
        SnapshotDescriptor("cid2", "0x" + sha(good), 3),
    ]

    def fetch(pointer):
        if pointer == "cid1":
            raise NetworkError("gone")
        return MirrorResponse(f"https://m/{pointer}", good)

    f = MagicMock(spec=GatewayFetcher)
    f.fetch.side_effect = fetch
    loader = SnapshotLoader(_registry(*descs), f)

    snaps = loader.load_range()
    assert [s.content_pointer for s in snaps] == ["cid0", "cid2"]
    latest = loader.load_latest()
    assert latest is not None and latest.content_pointer == "cid2"


def test_load_latest_on_empty_registry():
    assert SnapshotLoader(_registry(), _fetcher()).load_latest() is None


def test_deeply_nested_payload_loads_without_raising():
    depth = 600
    content = b'{"as_of_utc": "2024-01-02T21:00:00Z", "a":' + b"[" * depth + b"]" * depth + b"}"
    loader = SnapshotLoader(
        _registry(SnapshotDescriptor("cid0", None, 1)),
        _fetcher(MirrorResponse("https://m1/cid0", content)),
    )
    snap = loader.load(0)
    assert snap is not None
    assert snap.verified is False


def test_unparseably_deep_payload_returns_none():
    depth = 200_000
    content = b'{"a":' + b"[" * depth + b"]" * depth + b"}"
    fetcher = _fetcher(*[MirrorResponse("https://m1/cid0", content)] * 3)
    loader = SnapshotLoader(_registry(SnapshotDescriptor("cid0", None, 1)), fetcher)

    report = loader.load_with_report(0)
    assert isinstance(report.final, Exhausted)
    assert all(isinstance(e, FormatError) for e in report.final.errors)
    assert report.snapshot is None
