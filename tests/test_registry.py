from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from navproof.registry.reader import REGISTRY_ABI, SnapshotDescriptor, StaticRegistryReader, Web3RegistryReader


def test_descriptor_from_contract_tuple():
    d = SnapshotDescriptor.from_tuple(("bafy/snapshot.json", bytes.fromhex("AB" * 32), 1704230000))
    assert d.content_pointer == "bafy/snapshot.json"
    assert d.expected_hash == "0x" + "ab" * 32
    assert d.timestamp_millis == 1704230000000
    assert d.is_anchored


def test_zero_digest_descriptor_is_not_anchored():
    d = SnapshotDescriptor.from_tuple(("cid", b"\x00" * 32, 1))
    assert not d.is_anchored


def test_static_registry():
    descs = [SnapshotDescriptor("a", None, 1), SnapshotDescriptor("b", None, 2)]
    reg = StaticRegistryReader(descs)
    assert reg.count() == 2
    assert reg.latest().content_pointer == "b"
    assert reg.by_index(0).content_pointer == "a"
    with pytest.raises(IndexError):
        reg.by_index(2)
    with pytest.raises(IndexError):
        StaticRegistryReader().latest()


def test_abi_exposes_read_functions():
    assert {f["name"] for f in REGISTRY_ABI} == {"getSnapshotCount", "getSnapshot", "getLatest"}


def test_web3_reader_requires_configuration():
    with pytest.raises(ValueError):
        Web3RegistryReader("", "")


def test_web3_reader_calls_contract_functions():
    reader = Web3RegistryReader("http://rpc", "0x0000000000000000000000000000000000000001")
    contract = MagicMock()
    contract.functions.getSnapshotCount.return_value.call.return_value = 4
    contract.functions.getSnapshot.return_value.call.return_value = ["cid2", b"\x11" * 32, 10]
    contract.functions.getLatest.return_value.call.return_value = ["cid3", b"\x22" * 32, 20]
    reader._contract = contract

    assert reader.count() == 4
    assert reader.by_index(2).content_pointer == "cid2"
    contract.functions.getSnapshot.assert_called_with(2)
    assert reader.latest().expected_hash == "0x" + "22" * 32
    with pytest.raises(IndexError):
        reader.by_index(-1)
