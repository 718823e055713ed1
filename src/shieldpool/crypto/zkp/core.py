"""
Core ZKP types and interfaces.

This module defines the backend abstraction, its configuration and the value
objects exchanged with it: the public statement a verifier sees and the
private witness only the prover holds.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ...errors import ConfigurationError, ValidationError
from ..hashing import DIGEST_SIZE
from ..notes import (
    MAX_AMOUNT,
    MAX_ASSET_ID,
    RANDOMNESS_BYTES,
    SECRET_BYTES,
    ShieldedNote,
    require_bytes,
    require_uint,
)
from ..randomness import (
    RandomSource,
    default_random_source,
    random_bytes,
    random_nonzero_scalar,
    seeded_random_source,
)
from .circuits import chunk_field_elements


@dataclass
class ZKPConfig:
    """Configuration for proving and verification."""
    # Window width of the fixed-base tables used during setup
    fixed_base_window: int = 8
    # Pippenger bucket width; 0 picks one from the number of points
    msm_window: int = 0
    # Subgroup-check points decoded from untrusted bytes
    validate_points: bool = True
    # Verification result cache
    enable_verification_cache: bool = True
    cache_size: int = 1000
    cache_ttl: float = 3600.0
    # Worker threads for batch verification
    max_workers: int = 4

    def validate(self) -> None:
        """Validate configuration parameters."""
        if not 1 <= self.fixed_base_window <= 16:
            raise ConfigurationError(
                "fixed_base_window must be between 1 and 16",
                field="fixed_base_window",
                value=self.fixed_base_window,
            )
        if self.msm_window < 0 or self.msm_window > 16:
            raise ConfigurationError(
                "msm_window must be between 0 and 16",
                field="msm_window",
                value=self.msm_window,
            )
        if self.cache_size <= 0:
            raise ConfigurationError("cache_size must be positive", field="cache_size", value=self.cache_size)
        if self.cache_ttl <= 0:
            raise ConfigurationError("cache_ttl must be positive", field="cache_ttl", value=self.cache_ttl)
        if self.max_workers <= 0:
            raise ConfigurationError("max_workers must be positive", field="max_workers", value=self.max_workers)


@dataclass(frozen=True)
class PublicStatement:
    """The values a verifier sees: (nullifier, commitment)."""
    nullifier: bytes
    commitment: bytes

    def __post_init__(self):
        require_bytes("nullifier", self.nullifier, DIGEST_SIZE)
        require_bytes("commitment", self.commitment, DIGEST_SIZE)

    def public_inputs(self) -> List[int]:
        return encode_public_inputs(self.nullifier, self.commitment)

    @classmethod
    def from_note(cls, note: ShieldedNote) -> "PublicStatement":
        return cls(nullifier=note.nullifier, commitment=note.commitment)


@dataclass(frozen=True)
class TransferWitness:
    """Private values known only to the note holder."""
    amount: int
    asset_id: int
    randomness: bytes
    secret: bytes

    def __post_init__(self):
        require_uint("amount", self.amount, MAX_AMOUNT)
        require_uint("asset_id", self.asset_id, MAX_ASSET_ID)
        require_bytes("randomness", self.randomness, RANDOMNESS_BYTES)
        require_bytes("secret", self.secret, SECRET_BYTES)

    def __repr__(self) -> str:
        return "TransferWitness(<hidden>)"

    @classmethod
    def from_note(cls, note: ShieldedNote, secret: bytes) -> "TransferWitness":
        return cls(
            amount=note.amount,
            asset_id=note.asset_id,
            randomness=note.randomness,
            secret=secret,
        )


def encode_public_inputs(nullifier: bytes, commitment: bytes) -> List[int]:
    """Field elements of the statement, nullifier chunks first."""
    for name, value in (("nullifier", nullifier), ("commitment", commitment)):
        if len(value) != DIGEST_SIZE:
            raise ValidationError(
                f"{name} must be exactly {DIGEST_SIZE} bytes", field=name, value=value
            )
    return chunk_field_elements(bytes(nullifier)) + chunk_field_elements(bytes(commitment))


class ZKPBackend(ABC):
    """Abstract base class for proof system backends."""

    def __init__(self, config: Optional[ZKPConfig] = None):
        self.config = config or ZKPConfig()
        self.config.validate()

    @abstractmethod
    def setup(self, rng: Optional[RandomSource] = None) -> Tuple[Any, Any]:
        """Run the trusted setup; returns ``(proving_key, verifying_key)``."""
        pass

    @abstractmethod
    def generate_proof(
        self,
        proving_key: Any,
        witness: TransferWitness,
        statement: PublicStatement,
        rng: Optional[RandomSource] = None,
    ) -> bytes:
        """Prove the witness satisfies the relation for ``statement``."""
        pass

    @abstractmethod
    def verify_proof(self, verifying_key: Any, proof: bytes, statement: PublicStatement) -> bool:
        """Check a serialized proof against ``statement``."""
        pass

    @abstractmethod
    def serialize_vk(self, verifying_key: Any) -> bytes:
        pass

    @abstractmethod
    def deserialize_vk(self, data: bytes) -> Any:
        pass

    @abstractmethod
    def get_circuit_info(self) -> Dict[str, Any]:
        """Get information about the circuit."""
        pass


__all__ = [
    "ZKPConfig",
    "PublicStatement",
    "TransferWitness",
    "encode_public_inputs",
    "ZKPBackend",
    "RandomSource",
    "default_random_source",
    "seeded_random_source",
    "random_bytes",
    "random_nonzero_scalar",
]
