"""
Cryptographic core of shieldpool.

Hash engines, commitment and nullifier derivation, and the Merkle anonymity
set. The proof system lives in ``shieldpool.crypto.zkp``.
"""

from .hashing import (
    Blake2sHasher,
    Hash,
    HashEngine,
    XorFoldHasher,
    available_hash_engines,
    default_hash_engine,
    get_hash_engine,
)
from .merkle import (
    TREE_DEPTH,
    MerkleAnonymitySet,
    MerkleProof,
    calculate_root,
    generate_proof,
    hash_pair,
    verify_proof,
)
from .notes import (
    CommitmentScheme,
    NullifierScheme,
    ShieldedNote,
    commit,
    create_note,
    generate_note,
    nullify,
    verify_note,
)
from .randomness import RandomSource, default_random_source, seeded_random_source

__all__ = [
    # Hashing
    "Hash",
    "HashEngine",
    "XorFoldHasher",
    "Blake2sHasher",
    "get_hash_engine",
    "default_hash_engine",
    "available_hash_engines",
    # Notes
    "CommitmentScheme",
    "NullifierScheme",
    "ShieldedNote",
    "commit",
    "nullify",
    "verify_note",
    "create_note",
    "generate_note",
    # Merkle
    "TREE_DEPTH",
    "MerkleAnonymitySet",
    "MerkleProof",
    "hash_pair",
    "calculate_root",
    "generate_proof",
    "verify_proof",
    # Randomness
    "RandomSource",
    "default_random_source",
    "seeded_random_source",
]
