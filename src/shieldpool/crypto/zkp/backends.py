"""
Groth16 backend over BLS12-381.

Ties together the trusted setup, the prover, the proof codec and the
verifier behind the ``ZKPBackend`` interface. Keys are explicit values
passed to every call; the backend only caches prepared verifying keys.
"""

import logging

logger = logging.getLogger(__name__)
import threading
from collections import OrderedDict
from typing import Any, Dict, Optional, Tuple

from ...errors import SerializationError
from ..randomness import RandomSource
from .circuits import circuit_info
from .core import PublicStatement, TransferWitness, ZKPBackend, ZKPConfig
from .generation import ProofGenerator, ProvingKey, TrustedSetup, VerifyingKey
from .serialization import (
    PROOF_SIZE,
    deserialize_pk,
    deserialize_vk,
    encode_proof,
    serialize_pk,
    serialize_vk,
)
from .verification import ProofVerifier

MAX_CACHED_VERIFIERS = 16


class Groth16Backend(ZKPBackend):
    """Backend for Groth16 proofs of the private transfer relation."""

    name = "groth16-bls12-381"

    def __init__(self, config: Optional[ZKPConfig] = None):
        super().__init__(config)
        # id(vk) -> (vk, verifier); holding vk keeps its id from being reused
        self._verifiers: "OrderedDict[int, Tuple[VerifyingKey, ProofVerifier]]" = OrderedDict()
        self._lock = threading.Lock()

    def setup(self, rng: Optional[RandomSource] = None) -> Tuple[ProvingKey, VerifyingKey]:
        """Run the trusted setup over the empty circuit."""
        pk, vk = TrustedSetup(self.config).run(rng)
        logger.info(
            "Trusted setup complete: %d public inputs, domain %d",
            vk.num_public_inputs,
            pk.domain_size,
        )
        return pk, vk

    def generate_proof(
        self,
        proving_key: ProvingKey,
        witness: TransferWitness,
        statement: PublicStatement,
        rng: Optional[RandomSource] = None,
    ) -> bytes:
        """
        Prove knowledge of ``witness`` for ``statement``.

        Returns:
            The 192-byte compressed proof

        Raises:
            ConstraintUnsatisfied: If the witness does not satisfy the circuit
            SerializationError: If the proof cannot be encoded
        """
        proof = ProofGenerator(proving_key, self.config).prove(witness, statement, rng)
        data = encode_proof(proof)
        if len(data) != PROOF_SIZE:
            raise SerializationError(
                f"Encoded proof has {len(data)} bytes, expected {PROOF_SIZE}",
                algorithm="groth16",
            )
        return data

    def verifier_for(self, verifying_key: VerifyingKey) -> ProofVerifier:
        """Shared verifier (prepared key and result cache) for ``verifying_key``."""
        key = id(verifying_key)
        with self._lock:
            entry = self._verifiers.get(key)
            if entry is not None and entry[0] is verifying_key:
                self._verifiers.move_to_end(key)
                return entry[1]
            verifier = ProofVerifier(verifying_key, self.config)
            self._verifiers[key] = (verifying_key, verifier)
            while len(self._verifiers) > MAX_CACHED_VERIFIERS:
                self._verifiers.popitem(last=False)
            return verifier

    def verify_proof(
        self, verifying_key: VerifyingKey, proof: bytes, statement: PublicStatement
    ) -> bool:
        """
        Check a proof against ``statement``.

        Returns:
            ``True`` if accepted; a rejected proof is ``False``, never an error

        Raises:
            SerializationError: If ``proof`` is not a valid encoding
        """
        return self.verifier_for(verifying_key).verify(proof, statement)

    def serialize_vk(self, verifying_key: VerifyingKey) -> bytes:
        return serialize_vk(verifying_key)

    def deserialize_vk(self, data: bytes) -> VerifyingKey:
        return deserialize_vk(data, self.config.validate_points)

    def serialize_pk(self, proving_key: ProvingKey) -> bytes:
        return serialize_pk(proving_key)

    def deserialize_pk(self, data: bytes) -> ProvingKey:
        return deserialize_pk(data)

    def get_circuit_info(self) -> Dict[str, Any]:
        info = dict(circuit_info())
        info["backend"] = self.name
        info["proof_size"] = PROOF_SIZE
        return info

    def cleanup(self) -> None:
        """Drop cached verifiers."""
        with self._lock:
            self._verifiers.clear()
