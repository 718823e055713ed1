"""
Hash engines and the 32-byte digest type for shieldpool.

Every higher layer (commitments, nullifiers, Merkle nodes and the proof
circuit) reaches the one-way function through a ``HashEngine`` so engines can
be swapped without touching callers.
"""

import logging

logger = logging.getLogger(__name__)
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, List, Union

from cryptography.hazmat.primitives import hashes

from ..errors import ConfigurationError

DIGEST_SIZE = 32


@dataclass(frozen=True)
class Hash:
    """Immutable 32-byte digest with comparison and string representation."""

    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, (bytes, bytearray)) or len(self.value) != DIGEST_SIZE:
            raise ValueError("Hash must be exactly 32 bytes")

    def __str__(self) -> str:
        return self.value.hex()

    def __repr__(self) -> str:
        return f"Hash('{self.value.hex()}')"

    def __lt__(self, other: "Hash") -> bool:
        return self.value < other.value

    def __le__(self, other: "Hash") -> bool:
        return self.value <= other.value

    def __gt__(self, other: "Hash") -> bool:
        return self.value > other.value

    def __ge__(self, other: "Hash") -> bool:
        return self.value >= other.value

    def __bytes__(self) -> bytes:
        return bytes(self.value)

    @classmethod
    def from_hex(cls, hex_string: str) -> "Hash":
        """Create a Hash from a hexadecimal string."""
        return cls(bytes.fromhex(hex_string))

    @classmethod
    def zero(cls) -> "Hash":
        """Create a zero hash (all zeros)."""
        return cls(b"\x00" * DIGEST_SIZE)

    def to_hex(self) -> str:
        return self.value.hex()


class HashEngine(ABC):
    """One-way function from arbitrary bytes to a 32-byte digest.

    Implementations must be deterministic and free of side effects; the empty
    input is valid.
    """

    name: str = "abstract"
    is_cryptographically_secure: bool = False

    @abstractmethod
    def digest(self, data: bytes) -> bytes:
        """Return the 32-byte digest of ``data``."""

    def hash(self, data: Union[bytes, bytearray]) -> Hash:
        return Hash(self.digest(bytes(data)))

    def digest_many(self, parts: List[bytes]) -> bytes:
        """Digest the concatenation of ``parts``."""
        return self.digest(b"".join(parts))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class XorFoldHasher(HashEngine):
    """Placeholder engine: XOR every input byte into position ``i % 32``.

    Commutative and trivially collidable. It is kept because the proof
    circuit carries a matching gadget for it; do not use it where binding
    matters.
    """

    name = "xor-fold"
    is_cryptographically_secure = False

    def digest(self, data: bytes) -> bytes:
        out = bytearray(DIGEST_SIZE)
        for i, byte in enumerate(data):
            out[i % DIGEST_SIZE] ^= byte
        return bytes(out)


class Blake2sHasher(HashEngine):
    """BLAKE2s-256 engine backed by ``cryptography``."""

    name = "blake2s"
    is_cryptographically_secure = True

    def digest(self, data: bytes) -> bytes:
        hasher = hashes.Hash(hashes.BLAKE2s(DIGEST_SIZE))
        hasher.update(data)
        return hasher.finalize()


_ENGINES: Dict[str, Callable[[], HashEngine]] = {
    XorFoldHasher.name: XorFoldHasher,
    Blake2sHasher.name: Blake2sHasher,
}


def available_hash_engines() -> List[str]:
    return sorted(_ENGINES)


def get_hash_engine(name: str) -> HashEngine:
    """
    Look up a hash engine by name.

    Args:
        name: Registered engine name (``"xor-fold"`` or ``"blake2s"``)

    Returns:
        A new engine instance

    Raises:
        ConfigurationError: If no engine is registered under ``name``
    """
    try:
        factory = _ENGINES[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown hash engine: {name!r}",
            field="hash_engine",
            value=name,
            expected=available_hash_engines(),
        ) from None
    engine = factory()
    if not engine.is_cryptographically_secure:
        logger.warning("Hash engine %s is not collision resistant", engine.name)
    return engine


def default_hash_engine() -> HashEngine:
    """Engine used when none is injected; the only one the circuit supports."""
    return XorFoldHasher()
