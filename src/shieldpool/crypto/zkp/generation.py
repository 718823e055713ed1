"""
Groth16 trusted setup and proof generation.

``TrustedSetup`` samples the toxic waste ``(tau, alpha, beta, gamma, delta)``
and evaluates the circuit's QAP at ``tau`` to produce the proving and
verifying keys. ``ProofGenerator`` computes the quotient polynomial with
coset FFTs and assembles a blinded proof ``(A, B, C)``.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ...errors import CryptographicError, SetupFailure
from ..randomness import RandomSource, default_random_source, random_nonzero_scalar
from .circuits import ConstraintSystem, PrivateTransferCircuit
from .core import PublicStatement, TransferWitness, ZKPConfig
from .curve import (
    G1,
    G2,
    Z1,
    Z2,
    FixedBaseTable,
    Point,
    add,
    multi_scalar_mul,
    neg,
    points_equal,
    scalar_mul,
)
from .field import MODULUS, EvaluationDomain, inv

logger = logging.getLogger(__name__)


@dataclass
class VerifyingKey:
    """Public parameters every verifier needs."""

    alpha_g1: Point
    beta_g2: Point
    gamma_g2: Point
    delta_g2: Point
    ic: List[Point]

    @property
    def num_public_inputs(self) -> int:
        """Field elements expected in a statement (``ic`` also covers the constant one)."""
        return len(self.ic) - 1

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VerifyingKey):
            return NotImplemented
        if len(self.ic) != len(other.ic):
            return False
        pairs = [
            (self.alpha_g1, other.alpha_g1),
            (self.beta_g2, other.beta_g2),
            (self.gamma_g2, other.gamma_g2),
            (self.delta_g2, other.delta_g2),
        ] + list(zip(self.ic, other.ic))
        return all(points_equal(p, q) for p, q in pairs)

    __hash__ = None


@dataclass
class ProvingKey:
    """Prover parameters bound to the circuit shape."""

    vk: VerifyingKey
    beta_g1: Point
    delta_g1: Point
    a_query: List[Point]
    b_g1_query: List[Point]
    b_g2_query: List[Point]
    h_query: List[Point]
    l_query: List[Point]
    num_inputs: int
    num_aux: int
    domain_size: int

    def shape(self) -> Dict[str, int]:
        return {
            "num_inputs": self.num_inputs,
            "num_aux": self.num_aux,
            "domain_size": self.domain_size,
        }


@dataclass
class Proof:
    """Groth16 proof ``(A in G1, B in G2, C in G1)``."""

    a: Point
    b: Point
    c: Point


@dataclass
class Toxic:
    """Setup trapdoor. Must be discarded once the keys exist."""

    tau: int
    alpha: int
    beta: int
    gamma: int
    delta: int

    def __repr__(self) -> str:
        return "Toxic(<hidden>)"


def _evaluate_qap(
    cs: ConstraintSystem, domain: EvaluationDomain, tau: int
) -> Tuple[List[int], List[int], List[int]]:
    """``u_i(tau), v_i(tau), w_i(tau)`` for every variable of ``cs``."""
    lagrange = domain.lagrange_at(tau)
    a_rows, b_rows, c_rows = cs.matrices()
    num_vars = cs.num_variables
    results = []
    for rows in (a_rows, b_rows, c_rows):
        out = [0] * num_vars
        for row, coeff_l in zip(rows, lagrange):
            for index, coeff in row:
                out[index] = (out[index] + coeff * coeff_l) % MODULUS
        results.append(out)
    return results[0], results[1], results[2]


class TrustedSetup:
    """Single-party Groth16 setup over the empty transfer circuit."""

    def __init__(self, config: Optional[ZKPConfig] = None):
        self.config = config or ZKPConfig()

    def sample_toxic(self, rng: RandomSource, domain: EvaluationDomain) -> Toxic:
        while True:
            tau = random_nonzero_scalar(rng, MODULUS)
            if domain.vanishing_at(tau) != 0:
                break
        return Toxic(
            tau=tau,
            alpha=random_nonzero_scalar(rng, MODULUS),
            beta=random_nonzero_scalar(rng, MODULUS),
            gamma=random_nonzero_scalar(rng, MODULUS),
            delta=random_nonzero_scalar(rng, MODULUS),
        )

    def run(self, rng: Optional[RandomSource] = None) -> Tuple[ProvingKey, VerifyingKey]:
        """
        Generate keys for the transfer circuit.

        Args:
            rng: Randomness source; a fresh ``SystemRandom`` when omitted

        Returns:
            ``(ProvingKey, VerifyingKey)``

        Raises:
            SetupFailure: If parameters cannot be produced
        """
        rng = rng or default_random_source()
        start = time.time()
        try:
            cs = PrivateTransferCircuit.empty().synthesize()
            domain = EvaluationDomain(cs.num_constraints + cs.num_inputs)
            toxic = self.sample_toxic(rng, domain)
            keys = self._generate(cs, domain, toxic)
        except Exception as e:
            raise SetupFailure(f"Trusted setup failed: {e}", algorithm="groth16", cause=e) from e
        logger.debug(
            "Setup for %d constraints over domain %d took %.2fs",
            cs.num_constraints,
            domain.size,
            time.time() - start,
        )
        return keys

    def _generate(
        self, cs: ConstraintSystem, domain: EvaluationDomain, toxic: Toxic
    ) -> Tuple[ProvingKey, VerifyingKey]:
        u, v, w = _evaluate_qap(cs, domain, toxic.tau)
        gamma_inv = inv(toxic.gamma)
        delta_inv = inv(toxic.delta)

        window = self.config.fixed_base_window
        g1_table = FixedBaseTable(G1, Z1, window)
        g2_table = FixedBaseTable(G2, Z2, window)

        def combined(i: int) -> int:
            return (toxic.beta * u[i] + toxic.alpha * v[i] + w[i]) % MODULUS

        num_inputs = cs.num_inputs
        ic = g1_table.batch_mul([combined(i) * gamma_inv for i in range(num_inputs)])
        l_query = g1_table.batch_mul(
            [combined(i) * delta_inv for i in range(num_inputs, cs.num_variables)]
        )

        t_tau = domain.vanishing_at(toxic.tau)
        h_scalars = []
        power = t_tau * delta_inv % MODULUS
        for _ in range(domain.size - 1):
            h_scalars.append(power)
            power = power * toxic.tau % MODULUS
        h_query = g1_table.batch_mul(h_scalars)

        a_query = g1_table.batch_mul(u)
        b_g1_query = g1_table.batch_mul(v)
        b_g2_query = g2_table.batch_mul(v)

        vk = VerifyingKey(
            alpha_g1=g1_table.mul(toxic.alpha),
            beta_g2=g2_table.mul(toxic.beta),
            gamma_g2=g2_table.mul(toxic.gamma),
            delta_g2=g2_table.mul(toxic.delta),
            ic=ic,
        )
        pk = ProvingKey(
            vk=vk,
            beta_g1=g1_table.mul(toxic.beta),
            delta_g1=g1_table.mul(toxic.delta),
            a_query=a_query,
            b_g1_query=b_g1_query,
            b_g2_query=b_g2_query,
            h_query=h_query,
            l_query=l_query,
            num_inputs=num_inputs,
            num_aux=cs.num_aux,
            domain_size=domain.size,
        )
        return pk, vk


class ProofGenerator:
    """Groth16 prover for the transfer circuit."""

    def __init__(self, proving_key: ProvingKey, config: Optional[ZKPConfig] = None):
        self.proving_key = proving_key
        self.config = config or ZKPConfig()

    def _compute_h(self, cs: ConstraintSystem, domain: EvaluationDomain) -> List[int]:
        z = cs.assignment()
        a_rows, b_rows, c_rows = cs.matrices()

        def evaluate(rows):
            return [sum(coeff * z[i] for i, coeff in row) % MODULUS for row in rows]

        a = domain.coset_fft(domain.ifft(evaluate(a_rows)))
        b = domain.coset_fft(domain.ifft(evaluate(b_rows)))
        c = domain.coset_fft(domain.ifft(evaluate(c_rows)))
        quotient = [(x * y - s) % MODULUS for x, y, s in zip(a, b, c)]
        h = domain.coset_ifft(domain.divide_by_vanishing_on_coset(quotient))
        if h[-1] != 0:
            raise CryptographicError("Quotient polynomial has unexpected degree", algorithm="groth16")
        return h[:-1]

    def prove(
        self,
        witness: TransferWitness,
        statement: PublicStatement,
        rng: Optional[RandomSource] = None,
    ) -> Proof:
        """
        Build a proof for ``statement``.

        Args:
            witness: The note holder's private values
            statement: Public (nullifier, commitment)
            rng: Source for the blinding factors ``r`` and ``s``

        Returns:
            A freshly blinded proof

        Raises:
            ConstraintUnsatisfied: If the witness does not match the statement
        """
        pk = self.proving_key
        rng = rng or default_random_source()
        start = time.time()

        cs = PrivateTransferCircuit.from_witness(witness, statement).check_satisfied()
        if (cs.num_inputs, cs.num_aux) != (pk.num_inputs, pk.num_aux):
            raise CryptographicError(
                "Proving key does not match the circuit shape", algorithm="groth16"
            )
        domain = EvaluationDomain(cs.num_constraints + cs.num_inputs)
        if domain.size != pk.domain_size:
            raise CryptographicError(
                "Proving key domain does not match the circuit", algorithm="groth16"
            )

        h = self._compute_h(cs, domain)
        z = cs.assignment()
        aux = cs.aux_values
        window = self.config.msm_window

        r = rng.randrange(0, MODULUS)
        s = rng.randrange(0, MODULUS)

        proof_a = add(
            add(pk.vk.alpha_g1, multi_scalar_mul(pk.a_query, z, Z1, window)),
            scalar_mul(pk.delta_g1, r),
        )
        proof_b = add(
            add(pk.vk.beta_g2, multi_scalar_mul(pk.b_g2_query, z, Z2, window)),
            scalar_mul(pk.vk.delta_g2, s),
        )
        b_g1 = add(
            add(pk.beta_g1, multi_scalar_mul(pk.b_g1_query, z, Z1, window)),
            scalar_mul(pk.delta_g1, s),
        )

        proof_c = add(
            multi_scalar_mul(pk.l_query, aux, Z1, window),
            multi_scalar_mul(pk.h_query, h, Z1, window),
        )
        proof_c = add(proof_c, scalar_mul(proof_a, s))
        proof_c = add(proof_c, scalar_mul(b_g1, r))
        proof_c = add(proof_c, neg(scalar_mul(pk.delta_g1, r * s)))

        logger.debug("Generated proof in %.2fs", time.time() - start)
        return Proof(a=proof_a, b=proof_b, c=proof_c)


def keys_info(pk: ProvingKey) -> Dict[str, Any]:
    return dict(pk.shape(), num_public_inputs=pk.vk.num_public_inputs)
