"""
Commitment and nullifier derivation.

``commitment = H(amount u128 LE || asset_id u32 LE || randomness)`` and
``nullifier = H(commitment || secret)``. A ``ShieldedNote`` is the depositor's
private record; losing it makes the deposit unredeemable.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..errors import ValidationError
from .hashing import DIGEST_SIZE, HashEngine, default_hash_engine
from .randomness import RandomSource, default_random_source, random_bytes

AMOUNT_BYTES = 16
ASSET_ID_BYTES = 4
RANDOMNESS_BYTES = 32
SECRET_BYTES = 32
COMMITMENT_PREIMAGE_BYTES = AMOUNT_BYTES + ASSET_ID_BYTES + RANDOMNESS_BYTES

MAX_AMOUNT = (1 << (8 * AMOUNT_BYTES)) - 1
MAX_ASSET_ID = (1 << (8 * ASSET_ID_BYTES)) - 1


def require_uint(name: str, value: Any, maximum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer", field=name, value=value)
    if value < 0 or value > maximum:
        raise ValidationError(
            f"{name} out of range", field=name, value=value, expected=f"0..{maximum}"
        )
    return value


def require_bytes(name: str, value: Any, size: int) -> bytes:
    if not isinstance(value, (bytes, bytearray)) or len(value) != size:
        raise ValidationError(
            f"{name} must be exactly {size} bytes",
            field=name,
            value=value,
            expected=f"{size} bytes",
        )
    return bytes(value)


def commitment_preimage(amount: int, asset_id: int, randomness: bytes) -> bytes:
    """The 52-byte buffer hashed into a commitment."""
    amount = require_uint("amount", amount, MAX_AMOUNT)
    asset_id = require_uint("asset_id", asset_id, MAX_ASSET_ID)
    randomness = require_bytes("randomness", randomness, RANDOMNESS_BYTES)
    return (
        amount.to_bytes(AMOUNT_BYTES, "little")
        + asset_id.to_bytes(ASSET_ID_BYTES, "little")
        + randomness
    )


class CommitmentScheme:
    """Derives public commitments from a hidden (amount, asset, randomness)."""

    def __init__(self, engine: Optional[HashEngine] = None):
        self.engine = engine or default_hash_engine()

    def commit(self, amount: int, asset_id: int, randomness: bytes) -> bytes:
        return self.engine.digest(commitment_preimage(amount, asset_id, randomness))

    def verify_note(self, note: "ShieldedNote", commitment: bytes) -> bool:
        """Recompute the note's commitment and compare it with ``commitment``."""
        try:
            expected = self.commit(note.amount, note.asset_id, note.randomness)
        except ValidationError:
            return False
        return expected == bytes(commitment)


class NullifierScheme:
    """Derives the single-use nullifier from a commitment and a secret."""

    def __init__(self, engine: Optional[HashEngine] = None):
        self.engine = engine or default_hash_engine()

    def nullify(self, commitment: bytes, secret: bytes) -> bytes:
        commitment = require_bytes("commitment", commitment, DIGEST_SIZE)
        secret = require_bytes("secret", secret, SECRET_BYTES)
        return self.engine.digest(commitment + secret)


def commit(
    amount: int, asset_id: int, randomness: bytes, engine: Optional[HashEngine] = None
) -> bytes:
    return CommitmentScheme(engine).commit(amount, asset_id, randomness)


def nullify(commitment: bytes, secret: bytes, engine: Optional[HashEngine] = None) -> bytes:
    return NullifierScheme(engine).nullify(commitment, secret)


def verify_note(
    note: "ShieldedNote", commitment: bytes, engine: Optional[HashEngine] = None
) -> bool:
    return CommitmentScheme(engine).verify_note(note, commitment)


@dataclass(frozen=True)
class ShieldedNote:
    """Private record of a deposit."""

    commitment: bytes
    amount: int
    asset_id: int
    randomness: bytes
    nullifier: bytes

    def __post_init__(self) -> None:
        require_bytes("commitment", self.commitment, DIGEST_SIZE)
        require_uint("amount", self.amount, MAX_AMOUNT)
        require_uint("asset_id", self.asset_id, MAX_ASSET_ID)
        require_bytes("randomness", self.randomness, RANDOMNESS_BYTES)
        require_bytes("nullifier", self.nullifier, DIGEST_SIZE)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "commitment": self.commitment.hex(),
            "amount": self.amount,
            "asset_id": self.asset_id,
            "randomness": self.randomness.hex(),
            "nullifier": self.nullifier.hex(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShieldedNote":
        try:
            return cls(
                commitment=bytes.fromhex(data["commitment"]),
                amount=int(data["amount"]),
                asset_id=int(data["asset_id"]),
                randomness=bytes.fromhex(data["randomness"]),
                nullifier=bytes.fromhex(data["nullifier"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Malformed note: {e}", cause=e) from e


def create_note(
    amount: int,
    asset_id: int,
    randomness: bytes,
    secret: bytes,
    engine: Optional[HashEngine] = None,
) -> ShieldedNote:
    """
    Build a note for a deposit.

    Args:
        amount: Deposited amount (u128)
        asset_id: Local asset id (u32)
        randomness: 32-byte blinding value
        secret: 32-byte spending secret, kept alongside the note

    Returns:
        The note with its commitment and nullifier filled in
    """
    engine = engine or default_hash_engine()
    commitment = CommitmentScheme(engine).commit(amount, asset_id, randomness)
    nullifier = NullifierScheme(engine).nullify(commitment, secret)
    return ShieldedNote(
        commitment=commitment,
        amount=amount,
        asset_id=asset_id,
        randomness=bytes(randomness),
        nullifier=nullifier,
    )


def generate_note(
    amount: int,
    asset_id: int,
    rng: Optional[RandomSource] = None,
    engine: Optional[HashEngine] = None,
) -> Tuple[ShieldedNote, bytes]:
    """Draw fresh randomness and secret; returns ``(note, secret)``."""
    rng = rng or default_random_source()
    randomness = random_bytes(rng, RANDOMNESS_BYTES)
    secret = random_bytes(rng, SECRET_BYTES)
    return create_note(amount, asset_id, randomness, secret, engine), secret
