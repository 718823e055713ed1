"""Reference ledger and bridge around the shielded pool core."""

from .assets import AssetRegistry, RegisteredAsset
from .ledger import (
    CommitmentLedger,
    CommitmentRecord,
    InMemoryCommitmentLedger,
    InMemoryNullifierLedger,
    NullifierLedger,
)
from .pool import EventType, PoolEvent, PrivacyBridge

__all__ = [
    "PrivacyBridge",
    "PoolEvent",
    "EventType",
    "CommitmentLedger",
    "NullifierLedger",
    "CommitmentRecord",
    "InMemoryCommitmentLedger",
    "InMemoryNullifierLedger",
    "AssetRegistry",
    "RegisteredAsset",
]
