from navproof.registry.reader import (
    REGISTRY_ABI,
    RegistryReader,
    SnapshotDescriptor,
    StaticRegistryReader,
    Web3RegistryReader,
)

__all__ = [
    "REGISTRY_ABI",
    "RegistryReader",
    "SnapshotDescriptor",
    "StaticRegistryReader",
    "Web3RegistryReader",
]
