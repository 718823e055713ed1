"""
Zero-knowledge proofs for shielded withdrawals.

Groth16 over BLS12-381 for the relation "the prover knows (amount, asset id,
randomness, secret) whose commitment and nullifier are the public ones".
The module-level functions use a shared default backend; keys are always
passed explicitly.

Typical flow::

    pk, vk = setup()
    proof = generate_proof(pk, witness, statement)
    assert verify_proof(vk, proof, statement)
"""

from typing import Optional, Tuple

from ..randomness import RandomSource, default_random_source, seeded_random_source
from .backends import Groth16Backend
from .circuits import (
    ConstraintSystem,
    LinearCombination,
    PrivateTransferCircuit,
    UInt8,
    XorFoldGadget,
    chunk_field_elements,
    circuit_info,
)
from .core import PublicStatement, TransferWitness, ZKPBackend, ZKPConfig, encode_public_inputs
from .field import EvaluationDomain
from .generation import Proof, ProofGenerator, ProvingKey, TrustedSetup, VerifyingKey
from .serialization import (
    PROOF_SIZE,
    decode_proof,
    deserialize_pk,
    deserialize_vk,
    encode_proof,
    serialize_pk,
    serialize_vk,
)
from .verification import PreparedVerifyingKey, ProofVerifier, VerificationCache, prepare_verifying_key

_default_backend = Groth16Backend()


def setup(rng: Optional[RandomSource] = None) -> Tuple[ProvingKey, VerifyingKey]:
    return _default_backend.setup(rng)


def generate_proof(
    proving_key: ProvingKey,
    witness: TransferWitness,
    statement: PublicStatement,
    rng: Optional[RandomSource] = None,
) -> bytes:
    return _default_backend.generate_proof(proving_key, witness, statement, rng)


def verify_proof(verifying_key: VerifyingKey, proof: bytes, statement: PublicStatement) -> bool:
    return _default_backend.verify_proof(verifying_key, proof, statement)


__all__ = [
    # Operations
    "setup",
    "generate_proof",
    "verify_proof",
    "serialize_vk",
    "deserialize_vk",
    "serialize_pk",
    "deserialize_pk",
    "encode_proof",
    "decode_proof",
    "encode_public_inputs",
    # Core types
    "ZKPBackend",
    "ZKPConfig",
    "PublicStatement",
    "TransferWitness",
    "PROOF_SIZE",
    "RandomSource",
    "default_random_source",
    "seeded_random_source",
    # Backends
    "Groth16Backend",
    # Circuits
    "ConstraintSystem",
    "LinearCombination",
    "UInt8",
    "XorFoldGadget",
    "PrivateTransferCircuit",
    "chunk_field_elements",
    "circuit_info",
    "EvaluationDomain",
    # Generation
    "TrustedSetup",
    "ProofGenerator",
    "ProvingKey",
    "VerifyingKey",
    "Proof",
    # Verification
    "ProofVerifier",
    "PreparedVerifyingKey",
    "VerificationCache",
    "prepare_verifying_key",
]
