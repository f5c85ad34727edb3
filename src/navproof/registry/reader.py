"""
Read-only access to the on-chain snapshot registry.

The registry is an append-only contract mapping a snapshot index to
(content pointer, sha256 of the file bytes, block timestamp in seconds).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol, Sequence

from navproof.config import Settings
from navproof.verify.digest import is_zero_digest, normalize_digest

logger = logging.getLogger(__name__)

_SNAPSHOT_OUTPUTS = [
    {"internalType": "string", "name": "cid", "type": "string"},
    {"internalType": "bytes32", "name": "sha256File", "type": "bytes32"},
    {"internalType": "uint256", "name": "timestamp", "type": "uint256"},
]

REGISTRY_ABI: list[dict[str, Any]] = [
    {
        "inputs": [],
        "name": "getSnapshotCount",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint256", "name": "index", "type": "uint256"}],
        "name": "getSnapshot",
        "outputs": _SNAPSHOT_OUTPUTS,
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "getLatest",
        "outputs": _SNAPSHOT_OUTPUTS,
        "stateMutability": "view",
        "type": "function",
    },
]


@dataclass(frozen=True)
class SnapshotDescriptor:
    content_pointer: str
    expected_hash: str | None  # "0x..." lowercase; may be the all-zero sentinel
    timestamp_seconds: int

    @property
    def timestamp_millis(self) -> int:
        return int(self.timestamp_seconds) * 1000

    @property
    def is_anchored(self) -> bool:
        return not is_zero_digest(self.expected_hash)

    @classmethod
    def from_tuple(cls, raw: Sequence[Any]) -> SnapshotDescriptor:
        cid, sha, ts = raw
        digest = normalize_digest(sha)
        return cls(
            content_pointer=str(cid or ""),
            expected_hash=f"0x{digest}" if digest else None,
            timestamp_seconds=int(ts or 0),
        )


class RegistryReader(Protocol):
    def count(self) -> int: ...

    def latest(self) -> SnapshotDescriptor: ...

    def by_index(self, index: int) -> SnapshotDescriptor: ...


class Web3RegistryReader:
    """Registry contract reader over JSON-RPC."""

    def __init__(self, rpc_url: str, address: str, *, request_timeout: float = 30.0):
        if not rpc_url or not address:
            raise ValueError("Registry not configured. Set REGISTRY_RPC_URL and REGISTRY_ADDRESS in your .env file.")
        self.rpc_url = rpc_url
        self.address = address
        self.request_timeout = request_timeout
        self._contract: Any = None

    @classmethod
    def from_settings(cls, settings: Settings) -> Web3RegistryReader:
        return cls(settings.registry_rpc_url or "", settings.registry_address or "")

    def _get_contract(self) -> Any:
        if self._contract is None:
            from web3 import Web3

            w3 = Web3(Web3.HTTPProvider(self.rpc_url, request_kwargs={"timeout": self.request_timeout}))
            self._contract = w3.eth.contract(address=Web3.to_checksum_address(self.address), abi=REGISTRY_ABI)
        return self._contract

    def count(self) -> int:
        return int(self._get_contract().functions.getSnapshotCount().call())

    def latest(self) -> SnapshotDescriptor:
        return SnapshotDescriptor.from_tuple(self._get_contract().functions.getLatest().call())

    def by_index(self, index: int) -> SnapshotDescriptor:
        if index < 0:
            raise IndexError(f"Snapshot index must be non-negative, got {index}")
        return SnapshotDescriptor.from_tuple(self._get_contract().functions.getSnapshot(int(index)).call())


class StaticRegistryReader:
    """In-memory registry, used for offline replay and tests."""

    def __init__(self, descriptors: Sequence[SnapshotDescriptor] = ()):
        self._descriptors = list(descriptors)

    def count(self) -> int:
        return len(self._descriptors)

    def latest(self) -> SnapshotDescriptor:
        if not self._descriptors:
            raise IndexError("Registry is empty")
        return self._descriptors[-1]

    def by_index(self, index: int) -> SnapshotDescriptor:
        if index < 0 or index >= len(self._descriptors):
            raise IndexError(f"Snapshot index {index} out of range (count={len(self._descriptors)})")
        return self._descriptors[index]
