"""
shieldpool: a shielded deposit pool.

Deposits are recorded as hiding commitments in an append-only Merkle
anonymity set; withdrawals reveal a single-use nullifier together with a
Groth16 proof that nullifier and commitment derive from the same secret note.
"""

__version__ = "0.1.0"

from .config import BridgeConfig
from .crypto import (
    Blake2sHasher,
    CommitmentScheme,
    HashEngine,
    MerkleAnonymitySet,
    NullifierScheme,
    ShieldedNote,
    XorFoldHasher,
    commit,
    create_note,
    generate_note,
    get_hash_engine,
    nullify,
    verify_note,
)
from .errors import ShieldPoolError

__all__ = [
    "__version__",
    "BridgeConfig",
    "HashEngine",
    "XorFoldHasher",
    "Blake2sHasher",
    "get_hash_engine",
    "CommitmentScheme",
    "NullifierScheme",
    "ShieldedNote",
    "commit",
    "nullify",
    "verify_note",
    "create_note",
    "generate_note",
    "MerkleAnonymitySet",
    "ShieldPoolError",
]
