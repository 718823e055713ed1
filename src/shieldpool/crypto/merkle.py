"""
Append-only Merkle anonymity set.

The pure functions (``calculate_root``, ``generate_proof``, ``verify_proof``)
define the tree: levels are built bottom-up pairing nodes left to right, an
unpaired trailing node is paired with the zero digest, and construction stops
once a single node remains or ``depth`` levels have been built. Proofs carry
one sibling per level built, so their length depends on the leaf count.

``MerkleAnonymitySet`` wraps a leaf sequence and serialises appends so leaf
indices are dense and never reused.
"""

import logging

logger = logging.getLogger(__name__)
import threading
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from ..errors import AnonymitySetFull, IndexOutOfBounds, ValidationError
from .hashing import DIGEST_SIZE, Hash, HashEngine, default_hash_engine

TREE_DEPTH = 20
ZERO_DIGEST = b"\x00" * DIGEST_SIZE

Node = Union[bytes, Hash]


def _raw(node: Node) -> bytes:
    if isinstance(node, Hash):
        return node.value
    return bytes(node)


def _leaf_list(leaves: Sequence[Node], depth: int) -> List[bytes]:
    if len(leaves) > (1 << depth):
        raise ValidationError(
            f"{len(leaves)} leaves exceed the capacity of a depth-{depth} tree",
            field="leaves",
            value=len(leaves),
            expected=f"<= {1 << depth}",
        )
    nodes = [_raw(leaf) for leaf in leaves]
    for node in nodes:
        if len(node) != DIGEST_SIZE:
            raise ValidationError(
                "Merkle leaves must be 32 bytes", field="leaves", value=node.hex()
            )
    return nodes


def hash_pair(left: Node, right: Node, engine: Optional[HashEngine] = None) -> bytes:
    """Parent digest of ``left`` and ``right``, in that order."""
    engine = engine or default_hash_engine()
    return engine.digest(_raw(left) + _raw(right))


def _next_level(level: List[bytes], engine: HashEngine) -> List[bytes]:
    parents = []
    for i in range(0, len(level), 2):
        right = level[i + 1] if i + 1 < len(level) else ZERO_DIGEST
        parents.append(hash_pair(level[i], right, engine))
    return parents


def calculate_root(
    leaves: Sequence[Node], depth: int = TREE_DEPTH, engine: Optional[HashEngine] = None
) -> bytes:
    """
    Compute the root of a leaf sequence.

    Args:
        leaves: Ordered 32-byte leaves
        depth: Maximum number of levels
        engine: Hash engine for node combination

    Returns:
        The 32-byte root; the zero digest for an empty sequence

    Raises:
        ValidationError: If there are more than ``2**depth`` leaves
    """
    engine = engine or default_hash_engine()
    level = _leaf_list(leaves, depth)
    if not level:
        return ZERO_DIGEST

    for _ in range(depth):
        if len(level) == 1:
            break
        level = _next_level(level, engine)
    return level[0]


def generate_proof(
    leaves: Sequence[Node],
    index: int,
    depth: int = TREE_DEPTH,
    engine: Optional[HashEngine] = None,
) -> List[bytes]:
    """
    Collect the sibling path of ``leaves[index]``.

    Args:
        leaves: Ordered 32-byte leaves
        index: Position of the leaf to prove
        depth: Maximum number of levels
        engine: Hash engine for node combination

    Returns:
        One sibling digest per level built, bottom first

    Raises:
        IndexOutOfBounds: If ``index`` does not name an existing leaf
    """
    engine = engine or default_hash_engine()
    if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < len(leaves):
        raise IndexOutOfBounds(index, len(leaves))
    level = _leaf_list(leaves, depth)

    proof = []
    current = index
    for _ in range(depth):
        if len(level) == 1:
            break
        sibling = current + 1 if current % 2 == 0 else current - 1
        proof.append(level[sibling] if sibling < len(level) else ZERO_DIGEST)
        level = _next_level(level, engine)
        current //= 2
    return proof


def verify_proof(
    leaf: Node,
    proof: Sequence[Node],
    index: int,
    expected_root: Node,
    engine: Optional[HashEngine] = None,
) -> bool:
    """Recompute the root from ``leaf`` and its sibling path.

    Returns ``False`` for any mismatch or malformed argument; never raises.
    """
    engine = engine or default_hash_engine()
    try:
        if isinstance(index, bool) or not isinstance(index, int) or index < 0:
            return False
        current = _raw(leaf)
        root = _raw(expected_root)
        if len(current) != DIGEST_SIZE or len(root) != DIGEST_SIZE:
            return False
        position = index
        for sibling in proof:
            sibling = _raw(sibling)
            if len(sibling) != DIGEST_SIZE:
                return False
            if position % 2 == 0:
                current = hash_pair(current, sibling, engine)
            else:
                current = hash_pair(sibling, current, engine)
            position //= 2
        # Bits left over mean the index lies outside the tree the path describes.
        return position == 0 and current == root
    except (TypeError, ValueError):
        return False


@dataclass(frozen=True)
class MerkleProof:
    """Inclusion proof for one leaf of an anonymity set."""

    leaf: bytes
    index: int
    siblings: Tuple[bytes, ...]
    root: bytes

    def verify(self, engine: Optional[HashEngine] = None) -> bool:
        return verify_proof(self.leaf, self.siblings, self.index, self.root, engine)

    def to_dict(self) -> dict:
        return {
            "leaf": self.leaf.hex(),
            "index": self.index,
            "siblings": [s.hex() for s in self.siblings],
            "root": self.root.hex(),
        }


class MerkleAnonymitySet:
    """Stateful leaf sequence with a cached root.

    Appends are serialised by a lock; readers see a consistent snapshot.
    """

    def __init__(
        self,
        depth: int = TREE_DEPTH,
        engine: Optional[HashEngine] = None,
        leaves: Optional[Sequence[Node]] = None,
    ):
        if depth < 1:
            raise ValidationError("Tree depth must be positive", field="depth", value=depth)
        self.depth = depth
        self.capacity = 1 << depth
        self.engine = engine or default_hash_engine()
        self._leaves: List[bytes] = _leaf_list(leaves or [], depth)
        self._positions = {leaf: i for i, leaf in reversed(list(enumerate(self._leaves)))}
        self._root: Optional[bytes] = None
        self._lock = threading.RLock()

    def append(self, leaf: Node) -> int:
        """Append a leaf and return its index."""
        raw = _raw(leaf)
        if len(raw) != DIGEST_SIZE:
            raise ValidationError("Merkle leaves must be 32 bytes", field="leaf", value=raw.hex())
        with self._lock:
            if len(self._leaves) >= self.capacity:
                raise AnonymitySetFull(
                    f"Anonymity set reached its capacity of {self.capacity} leaves"
                )
            index = len(self._leaves)
            self._leaves.append(raw)
            self._positions.setdefault(raw, index)
            self._root = None
        logger.debug("Appended leaf %d to anonymity set", index)
        return index

    @property
    def root(self) -> bytes:
        with self._lock:
            if self._root is None:
                self._root = calculate_root(self._leaves, self.depth, self.engine)
            return self._root

    @property
    def leaves(self) -> Tuple[bytes, ...]:
        with self._lock:
            return tuple(self._leaves)

    def generate_proof(self, index: int) -> MerkleProof:
        with self._lock:
            siblings = generate_proof(self._leaves, index, self.depth, self.engine)
            return MerkleProof(
                leaf=self._leaves[index],
                index=index,
                siblings=tuple(siblings),
                root=self.root,
            )

    def verify(self, proof: MerkleProof) -> bool:
        """Check ``proof`` against the current root."""
        return proof.root == self.root and proof.verify(self.engine)

    def index_of(self, leaf: Node) -> Optional[int]:
        """Index of the first occurrence of ``leaf``, or ``None``."""
        with self._lock:
            return self._positions.get(_raw(leaf))

    def __len__(self) -> int:
        with self._lock:
            return len(self._leaves)

    def __contains__(self, leaf: object) -> bool:
        if not isinstance(leaf, (bytes, bytearray, Hash)):
            return False
        return self.index_of(leaf) is not None

    def __iter__(self) -> Iterator[bytes]:
        return iter(self.leaves)

    def __repr__(self) -> str:
        return f"MerkleAnonymitySet(depth={self.depth}, leaves={len(self)})"
