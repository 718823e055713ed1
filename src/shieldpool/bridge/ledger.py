"""
Ledger collaborators for commitments and nullifiers.

The abstract interfaces describe what a storage backend must provide; the
in-memory implementations back the reference ``PrivacyBridge`` and tests.
Commitment metadata never includes the deposited amount.
"""

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..errors import CommitmentAlreadyExists, NullifierAlreadyUsed


@dataclass(frozen=True)
class CommitmentRecord:
    """Public metadata stored per commitment."""

    depositor: str
    asset_id: int
    leaf_index: int
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "depositor": self.depositor,
            "asset_id": self.asset_id,
            "leaf_index": self.leaf_index,
            "timestamp": self.timestamp,
        }


class CommitmentLedger(ABC):
    """Key-value set of recorded commitments."""

    @abstractmethod
    def exists(self, commitment: bytes) -> bool:
        pass

    @abstractmethod
    def insert(self, commitment: bytes, record: CommitmentRecord) -> None:
        """Record ``commitment``; raises ``CommitmentAlreadyExists`` on duplicates."""
        pass

    @abstractmethod
    def get(self, commitment: bytes) -> Optional[CommitmentRecord]:
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class NullifierLedger(ABC):
    """Set of consumed nullifiers."""

    @abstractmethod
    def exists(self, nullifier: bytes) -> bool:
        pass

    @abstractmethod
    def mark_consumed(self, nullifier: bytes) -> None:
        """Atomic check-and-set; raises ``NullifierAlreadyUsed`` if already consumed."""
        pass


class InMemoryCommitmentLedger(CommitmentLedger):
    """Dictionary-backed commitment ledger."""

    def __init__(self):
        self._records: Dict[bytes, CommitmentRecord] = {}
        self._lock = threading.RLock()

    def exists(self, commitment: bytes) -> bool:
        with self._lock:
            return bytes(commitment) in self._records

    def insert(self, commitment: bytes, record: CommitmentRecord) -> None:
        key = bytes(commitment)
        with self._lock:
            if key in self._records:
                raise CommitmentAlreadyExists(f"Commitment {key.hex()} already recorded")
            self._records[key] = record

    def get(self, commitment: bytes) -> Optional[CommitmentRecord]:
        with self._lock:
            return self._records.get(bytes(commitment))

    def count(self) -> int:
        with self._lock:
            return len(self._records)


class InMemoryNullifierLedger(NullifierLedger):
    """Set-backed nullifier ledger."""

    def __init__(self):
        self._consumed = set()
        self._lock = threading.RLock()

    def exists(self, nullifier: bytes) -> bool:
        with self._lock:
            return bytes(nullifier) in self._consumed

    def mark_consumed(self, nullifier: bytes) -> None:
        key = bytes(nullifier)
        with self._lock:
            if key in self._consumed:
                raise NullifierAlreadyUsed(f"Nullifier {key.hex()} already used")
            self._consumed.add(key)

    def count(self) -> int:
        with self._lock:
            return len(self._consumed)
