"""
Groth16 verification.

A ``PreparedVerifyingKey`` caches ``e(alpha, beta)`` so each check costs
three Miller loops and one final exponentiation. ``ProofVerifier`` adds a
result cache and thread-pooled batch verification on top.
"""

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from py_ecc.optimized_bls12_381 import FQ12, final_exponentiate, pairing

from ...errors import SerializationError
from .core import PublicStatement, ZKPConfig, encode_public_inputs
from .curve import Z1, add, multi_scalar_mul, neg
from .generation import Proof, VerifyingKey
from .serialization import decode_proof, serialize_vk

logger = logging.getLogger(__name__)


@dataclass
class PreparedVerifyingKey:
    """Verifying key with the constant pairing precomputed."""
    vk: VerifyingKey
    alpha_beta: FQ12


def prepare_verifying_key(vk: VerifyingKey) -> PreparedVerifyingKey:
    return PreparedVerifyingKey(vk=vk, alpha_beta=pairing(vk.beta_g2, vk.alpha_g1))


def verify_with_prepared(
    pvk: PreparedVerifyingKey, proof: Proof, public_inputs: Sequence[int]
) -> bool:
    """
    Run the pairing check ``e(A,B) = e(alpha,beta) e(acc,gamma) e(C,delta)``.

    Args:
        pvk: Prepared verifying key
        proof: Decoded proof
        public_inputs: Statement field elements, without the constant one

    Returns:
        Whether the proof is accepted; a length mismatch is ``False``
    """
    vk = pvk.vk
    if len(public_inputs) != vk.num_public_inputs:
        return False
    acc = add(vk.ic[0], multi_scalar_mul(vk.ic[1:], list(public_inputs), Z1))

    product = (
        pairing(proof.b, neg(proof.a), final_exponentiate=False)
        * pairing(vk.gamma_g2, acc, final_exponentiate=False)
        * pairing(vk.delta_g2, proof.c, final_exponentiate=False)
    )
    return final_exponentiate(product) * pvk.alpha_beta == FQ12.one()


@dataclass
class CacheEntry:
    """Entry in the verification cache."""
    result: bool
    timestamp: float
    access_count: int = 0

    def is_expired(self, ttl: float) -> bool:
        return time.time() - self.timestamp > ttl


class VerificationCache:
    """LRU cache of verification verdicts keyed by proof and statement."""

    def __init__(self, max_size: int = 1000, ttl: float = 3600.0):
        self.max_size = max_size
        self.ttl = ttl
        self._cache: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Optional[bool]:
        with self._lock:
            entry = self._cache.get(key)
            if entry is not None:
                if not entry.is_expired(self.ttl):
                    self._cache.move_to_end(key)
                    entry.access_count += 1
                    self._hits += 1
                    return entry.result
                del self._cache[key]
            self._misses += 1
            return None

    def set(self, key: str, result: bool) -> None:
        with self._lock:
            self._cache.pop(key, None)
            while len(self._cache) >= self.max_size:
                self._cache.popitem(last=False)
            self._cache[key] = CacheEntry(result, time.time())

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            total_requests = self._hits + self._misses
            return {
                "size": len(self._cache),
                "max_size": self.max_size,
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": self._hits / total_requests if total_requests else 0.0,
                "ttl": self.ttl,
            }


class ProofVerifier:
    """Verifies many proofs against one verifying key."""

    def __init__(self, vk: VerifyingKey, config: Optional[ZKPConfig] = None):
        self.config = config or ZKPConfig()
        self.prepared = prepare_verifying_key(vk)
        self._vk_digest = hashlib.sha256(serialize_vk(vk)).hexdigest()
        self.cache: Optional[VerificationCache] = None
        if self.config.enable_verification_cache:
            self.cache = VerificationCache(self.config.cache_size, self.config.cache_ttl)
        self._stats = {"verified": 0, "accepted": 0, "rejected": 0}
        self._lock = threading.Lock()

    @property
    def vk(self) -> VerifyingKey:
        return self.prepared.vk

    def _cache_key(self, proof: bytes, statement: PublicStatement) -> str:
        data = self._vk_digest.encode() + bytes(proof) + statement.nullifier + statement.commitment
        return hashlib.sha256(data).hexdigest()

    def verify(self, proof: bytes, statement: PublicStatement) -> bool:
        """
        Verify a serialized proof.

        Raises:
            SerializationError: If ``proof`` is not a valid encoding
        """
        key = None
        if self.cache is not None and isinstance(proof, (bytes, bytearray)):
            key = self._cache_key(proof, statement)
            cached = self.cache.get(key)
            if cached is not None:
                return cached

        decoded = decode_proof(proof, self.config.validate_points)
        start = time.time()
        result = verify_with_prepared(
            self.prepared, decoded, encode_public_inputs(statement.nullifier, statement.commitment)
        )
        logger.debug("Verified proof in %.3fs: %s", time.time() - start, result)

        with self._lock:
            self._stats["verified"] += 1
            self._stats["accepted" if result else "rejected"] += 1
        if key is not None:
            self.cache.set(key, result)
        return result

    def verify_batch(
        self, items: Sequence[Tuple[bytes, PublicStatement]]
    ) -> List[bool]:
        """Verify ``(proof, statement)`` pairs concurrently; malformed proofs are ``False``."""
        if not items:
            return []

        def check(item: Tuple[bytes, PublicStatement]) -> bool:
            proof, statement = item
            try:
                return self.verify(proof, statement)
            except SerializationError as e:
                logger.debug("Rejected malformed proof in batch: %s", e)
                return False

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            return list(executor.map(check, items))

    def get_verification_stats(self) -> Dict[str, Any]:
        with self._lock:
            stats = dict(self._stats)
        if self.cache is not None:
            stats["cache"] = self.cache.get_stats()
        return stats
