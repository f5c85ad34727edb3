"""
Per-index snapshot loading: registry descriptor -> mirrors -> digest check.

Each attempt produces an explicit outcome instead of a stashed exception:

    Success(result)      structured payload obtained (result.ok may be False)
    Retryable(error)     fetch/parse fault; the next attempt starts fresh
    Exhausted(errors)    attempt budget spent without a payload

Failures never escape ``load``; callers get ``None`` and treat the snapshot
as unavailable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Union

from requests.exceptions import RequestException

from navproof.config import Settings
from navproof.data.gateway import GatewayFetcher
from navproof.errors import NavproofError
from navproof.registry.reader import RegistryReader, SnapshotDescriptor
from navproof.snapshots.models import VerifiedSnapshot
from navproof.verify.digest import VerificationResult, is_zero_digest, verify_snapshot_bytes

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 3


@dataclass(frozen=True)
class Success:
    attempt: int
    result: VerificationResult


@dataclass(frozen=True)
class Retryable:
    attempt: int
    error: Exception


@dataclass(frozen=True)
class Exhausted:
    attempts: int
    errors: tuple[Exception, ...]

    @property
    def last_error(self) -> Exception | None:
        return self.errors[-1] if self.errors else None


AttemptOutcome = Union[Success, Retryable]


@dataclass
class LoadReport:
    index: int
    descriptor: SnapshotDescriptor | None = None
    outcomes: list[AttemptOutcome] = field(default_factory=list)
    final: Success | Exhausted | None = None
    snapshot: VerifiedSnapshot | None = None
    registry_error: Exception | None = None

    @property
    def attempts(self) -> int:
        return len(self.outcomes)

    @property
    def errors(self) -> list[Exception]:
        return [o.error for o in self.outcomes if isinstance(o, Retryable)]


class SnapshotLoader:
    def __init__(
        self,
        registry: RegistryReader,
        fetcher: GatewayFetcher | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ):
        self.registry = registry
        self.fetcher = fetcher or GatewayFetcher()
        self.max_attempts = max(1, int(max_attempts))

    @classmethod
    def from_settings(cls, settings: Settings, registry: RegistryReader) -> SnapshotLoader:
        return cls(registry, GatewayFetcher.from_settings(settings), max_attempts=settings.max_attempts)

    def _attempt(self, n: int, descriptor: SnapshotDescriptor, expected: str | None) -> AttemptOutcome:
        try:
            mirrored = self.fetcher.fetch(descriptor.content_pointer)
            result = verify_snapshot_bytes(mirrored.content, expected, source_url=mirrored.url)
        except (NavproofError, RequestException, ValueError) as e:
            return Retryable(attempt=n, error=e)
        return Success(attempt=n, result=result)

    def resolve(self, index: int, descriptor: SnapshotDescriptor) -> LoadReport:
        """Run the attempt loop for an already-read descriptor."""
        report = LoadReport(index=index, descriptor=descriptor)
        expected = None if is_zero_digest(descriptor.expected_hash) else descriptor.expected_hash

        for n in range(1, self.max_attempts + 1):
            outcome = self._attempt(n, descriptor, expected)
            report.outcomes.append(outcome)
            if isinstance(outcome, Success):
                report.final = outcome
                report.snapshot = VerifiedSnapshot(
                    content_pointer=descriptor.content_pointer,
                    expected_hash=descriptor.expected_hash,
                    timestamp_millis=descriptor.timestamp_millis,
                    payload=outcome.result.record,
                    verified=outcome.result.ok,
                )
                if not outcome.result.ok:
                    logger.info(
                        "Snapshot %s fetched but not verified (mode=%s, raw=%s)",
                        index,
                        outcome.result.mode.value,
                        outcome.result.raw_digest,
                    )
                return report
            logger.debug("Snapshot %s attempt %s/%s failed: %s", index, n, self.max_attempts, outcome.error)

        report.final = Exhausted(attempts=report.attempts, errors=tuple(report.errors))
        logger.warning("snapshot fetch failed @ index %s: %s", index, report.final.last_error)
        return report

    def load_with_report(self, index: int) -> LoadReport:
        try:
            descriptor = self.registry.by_index(index)
        except Exception as e:
            logger.warning("registry read failed @ index %s: %s", index, e)
            return LoadReport(index=index, registry_error=e)
        return self.resolve(index, descriptor)

    def load(self, index: int) -> VerifiedSnapshot | None:
        return self.load_with_report(index).snapshot

    def load_latest(self) -> VerifiedSnapshot | None:
        try:
            n = self.registry.count()
            if n == 0:
                return None
            descriptor = self.registry.latest()
        except Exception as e:
            logger.warning("registry read failed for latest snapshot: %s", e)
            return None
        return self.resolve(n - 1, descriptor).snapshot

    def load_range(self, start: int = 0, stop: int | None = None) -> list[VerifiedSnapshot]:
        """Load indices [start, stop) one at a time, skipping unavailable ones."""
        if stop is None:
            try:
                stop = self.registry.count()
            except Exception as e:
                logger.warning("registry count failed: %s", e)
                return []
        out: list[VerifiedSnapshot] = []
        for i in range(max(0, start), stop):
            snap = self.load(i)
            if snap is not None:
                out.append(snap)
        return out
