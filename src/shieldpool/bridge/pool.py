"""
Reference privacy bridge.

Glue between the cryptographic core and its ledger collaborators: deposits
record a commitment and grow the anonymity set, withdrawals verify a proof
and consume the nullifier exactly once. Authorization, fees and cross-chain
message delivery are left to the embedding system.
"""

import itertools
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config import BridgeConfig
from ..crypto.hashing import get_hash_engine
from ..crypto.merkle import MerkleAnonymitySet, MerkleProof
from ..crypto.notes import CommitmentScheme
from ..crypto.zkp.backends import Groth16Backend
from ..crypto.zkp.core import PublicStatement
from ..crypto.zkp.generation import VerifyingKey
from ..errors import (
    AnonymitySetFull,
    AssetNotRegistered,
    CommitmentAlreadyExists,
    CommitmentNotFound,
    DepositBelowMinimum,
    ErrorContext,
    InvalidProof,
    NullifierAlreadyUsed,
    SerializationError,
    VerifyingKeyNotSet,
    VerifyingKeyTooLarge,
)
from ..logging import LogContext, PoolLogger, get_logger
from .assets import AssetRegistry, RegisteredAsset
from .ledger import (
    CommitmentLedger,
    CommitmentRecord,
    InMemoryCommitmentLedger,
    InMemoryNullifierLedger,
    NullifierLedger,
)


class EventType(Enum):
    """Events emitted by the bridge."""

    ASSET_SHIELDED = "asset_shielded"
    ASSET_UNSHIELDED = "asset_unshielded"
    VERIFYING_KEY_SET = "verifying_key_set"
    ASSET_REGISTERED = "asset_registered"


@dataclass(frozen=True)
class PoolEvent:
    """An emitted event; ``sequence`` orders events of one bridge."""

    event_type: EventType
    sequence: int
    data: Dict[str, Any]
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.value,
            "sequence": self.sequence,
            "data": self.data,
            "timestamp": self.timestamp,
        }


class PrivacyBridge:
    """Shielded pool with an in-process ledger."""

    def __init__(
        self,
        config: Optional[BridgeConfig] = None,
        commitments: Optional[CommitmentLedger] = None,
        nullifiers: Optional[NullifierLedger] = None,
        assets: Optional[AssetRegistry] = None,
        backend: Optional[Groth16Backend] = None,
        logger: Optional[PoolLogger] = None,
    ):
        self.config = config or BridgeConfig()
        self.config.validate()
        self.engine = get_hash_engine(self.config.hash_engine)
        self.commitment_scheme = CommitmentScheme(self.engine)
        self.commitments = commitments or InMemoryCommitmentLedger()
        self.nullifiers = nullifiers or InMemoryNullifierLedger()
        self.assets = assets or AssetRegistry()
        self.backend = backend or Groth16Backend()
        self.anonymity_set = MerkleAnonymitySet(self.config.tree_depth, self.engine)
        self.logger = logger or get_logger("shieldpool.bridge")

        self._verifying_key: Optional[VerifyingKey] = None
        self._events: List[PoolEvent] = []
        self._sequence = itertools.count()
        self._lock = threading.RLock()

    def _emit(self, event_type: EventType, **data: Any) -> PoolEvent:
        with self._lock:
            event = PoolEvent(event_type, next(self._sequence), data)
            self._events.append(event)
        self.logger.info(
            event_type.value,
            context=LogContext(component="bridge", operation=event_type.value),
            extra={k: v.hex() if isinstance(v, bytes) else v for k, v in data.items()},
        )
        return event

    def _context(self, operation: str) -> ErrorContext:
        return ErrorContext(component="bridge", operation=operation)

    def _asset_is_active(self, asset_id: int) -> bool:
        asset = self.assets.by_local_id(asset_id)
        return asset is not None and asset.is_active

    def deposit(self, depositor: str, amount: int, asset_id: int, randomness: bytes) -> bytes:
        """
        Shield ``amount`` of ``asset_id``.

        Args:
            depositor: Account making the deposit
            amount: Amount in the asset's smallest unit
            asset_id: Local asset id
            randomness: 32-byte blinding value chosen by the depositor

        Returns:
            The recorded commitment

        Raises:
            CommitmentAlreadyExists: If the commitment is already recorded
            AssetNotRegistered: If registrations are required and missing
            AnonymitySetFull: If the anonymity set is at capacity
        """
        if self.config.require_registered_assets and not self._asset_is_active(asset_id):
            raise AssetNotRegistered(
                f"Local asset id {asset_id} is not registered", context=self._context("deposit")
            )
        commitment = self.commitment_scheme.commit(amount, asset_id, randomness)

        with self._lock:
            if self.commitments.exists(commitment):
                raise CommitmentAlreadyExists(
                    f"Commitment {commitment.hex()} already recorded",
                    context=self._context("deposit"),
                )
            leaf_index = len(self.anonymity_set)
            if leaf_index >= self.anonymity_set.capacity:
                raise AnonymitySetFull(
                    f"Anonymity set reached its capacity of {self.anonymity_set.capacity} leaves",
                    context=self._context("deposit"),
                )
            # Ledger first: a failed insert must not leave an orphan leaf.
            self.commitments.insert(
                commitment,
                CommitmentRecord(depositor=depositor, asset_id=asset_id, leaf_index=leaf_index),
            )
            self.anonymity_set.append(commitment)

        self._emit(
            EventType.ASSET_SHIELDED,
            commitment=commitment,
            asset_id=asset_id,
            depositor=depositor,
            leaf_index=leaf_index,
        )
        return commitment

    def deposit_registered_asset(
        self, depositor: str, external_asset_id: str, amount: int, randomness: bytes
    ) -> bytes:
        """Deposit an externally identified asset under its local id."""
        resolved = self.assets.local_id_and_minimum(external_asset_id)
        if resolved is None:
            raise AssetNotRegistered(
                f"Asset {external_asset_id!r} is not registered",
                context=self._context("deposit_registered_asset"),
            )
        local_id, minimum = resolved
        if amount < minimum:
            raise DepositBelowMinimum(
                f"Deposit of {amount} is below the minimum of {minimum}",
                context=self._context("deposit_registered_asset"),
            )
        return self.deposit(depositor, amount, local_id, randomness)

    def set_verifying_key(self, vk_bytes: bytes) -> VerifyingKey:
        """
        Install the verifying key used for withdrawals.

        Raises:
            VerifyingKeyTooLarge: If the encoding exceeds the configured bound
            SerializationError: If the bytes do not decode to a key
        """
        if len(vk_bytes) > self.config.max_verifying_key_size:
            raise VerifyingKeyTooLarge(
                f"Verifying key of {len(vk_bytes)} bytes exceeds "
                f"{self.config.max_verifying_key_size}",
                context=self._context("set_verifying_key"),
            )
        vk = self.backend.deserialize_vk(vk_bytes)
        with self._lock:
            self._verifying_key = vk
        self._emit(EventType.VERIFYING_KEY_SET, size=len(vk_bytes))
        return vk

    @property
    def verifying_key(self) -> Optional[VerifyingKey]:
        with self._lock:
            return self._verifying_key

    def withdraw(self, nullifier: bytes, commitment: bytes, proof: bytes, asset_id: int) -> None:
        """
        Redeem a commitment by revealing its nullifier with a proof.

        Raises:
            VerifyingKeyNotSet: If no key is installed
            CommitmentNotFound: If ``commitment`` was never deposited
            NullifierAlreadyUsed: If the nullifier was consumed before
            InvalidProof: If the proof is malformed or rejected
        """
        vk = self.verifying_key
        if vk is None:
            raise VerifyingKeyNotSet("No verifying key installed", context=self._context("withdraw"))
        if not self.commitments.exists(commitment):
            raise CommitmentNotFound(
                f"Commitment {bytes(commitment).hex()} not found", context=self._context("withdraw")
            )
        if self.nullifiers.exists(nullifier):
            raise NullifierAlreadyUsed(
                f"Nullifier {bytes(nullifier).hex()} already used",
                context=self._context("withdraw"),
            )

        statement = PublicStatement(nullifier=bytes(nullifier), commitment=bytes(commitment))
        try:
            accepted = self.backend.verify_proof(vk, proof, statement)
        except SerializationError as e:
            raise InvalidProof(
                f"Malformed proof: {e.message}", context=self._context("withdraw"), cause=e
            ) from e
        if not accepted:
            raise InvalidProof("Proof rejected", context=self._context("withdraw"))

        # Atomic check-and-set; a concurrent withdrawal of the same note loses here.
        self.nullifiers.mark_consumed(nullifier)
        self._emit(EventType.ASSET_UNSHIELDED, nullifier=bytes(nullifier), asset_id=asset_id)

    def register_asset(self, external_id: str, min_deposit: int = 0) -> RegisteredAsset:
        asset = self.assets.register(external_id, min_deposit)
        self._emit(
            EventType.ASSET_REGISTERED,
            external_id=external_id,
            local_id=asset.local_id,
            min_deposit=min_deposit,
        )
        return asset

    def merkle_root(self) -> bytes:
        return self.anonymity_set.root

    def commitment_count(self) -> int:
        return self.commitments.count()

    def inclusion_proof(self, commitment: bytes) -> MerkleProof:
        """Anonymity-set membership proof for a recorded commitment."""
        index = self.anonymity_set.index_of(commitment)
        if index is None:
            raise CommitmentNotFound(
                f"Commitment {bytes(commitment).hex()} not found",
                context=self._context("inclusion_proof"),
            )
        return self.anonymity_set.generate_proof(index)

    def is_spent(self, nullifier: bytes) -> bool:
        return self.nullifiers.exists(nullifier)

    def events(self, event_type: Optional[EventType] = None) -> List[PoolEvent]:
        with self._lock:
            if event_type is None:
                return list(self._events)
            return [e for e in self._events if e.event_type == event_type]
