"""
R1CS constraint systems and the private transfer circuit.

A ``ConstraintSystem`` collects constraints ``<A,z> * <B,z> = <C,z>`` over the
BLS12-381 scalar field, where ``z = [1, inputs..., aux...]``. Variables always
carry a value; the empty circuit simply assigns zeros, so the constraint
shape never depends on the witness.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ...errors import ConstraintUnsatisfied
from ..hashing import DIGEST_SIZE
from ..notes import (
    AMOUNT_BYTES,
    ASSET_ID_BYTES,
    RANDOMNESS_BYTES,
    SECRET_BYTES,
)
from .field import MODULUS

CHUNK_BYTES = 31

INPUT = "input"
AUX = "aux"


@dataclass(frozen=True)
class Variable:
    """A wire of the constraint system."""

    kind: str
    index: int

    def __repr__(self) -> str:
        return f"{self.kind}[{self.index}]"


ONE = Variable(INPUT, 0)


class LinearCombination:
    """Sparse sum of ``coeff * variable`` terms."""

    __slots__ = ("terms",)

    def __init__(self, terms: Optional[Dict[Variable, int]] = None):
        self.terms: Dict[Variable, int] = {}
        for var, coeff in (terms or {}).items():
            coeff %= MODULUS
            if coeff:
                self.terms[var] = coeff

    @classmethod
    def zero(cls) -> "LinearCombination":
        return cls()

    @classmethod
    def of(cls, var: Variable, coeff: int = 1) -> "LinearCombination":
        return cls({var: coeff})

    @classmethod
    def constant(cls, value: int) -> "LinearCombination":
        return cls({ONE: value})

    def __add__(self, other: "LinearCombination") -> "LinearCombination":
        terms = dict(self.terms)
        for var, coeff in other.terms.items():
            terms[var] = (terms.get(var, 0) + coeff) % MODULUS
        return LinearCombination(terms)

    def __neg__(self) -> "LinearCombination":
        return LinearCombination({var: -coeff for var, coeff in self.terms.items()})

    def __sub__(self, other: "LinearCombination") -> "LinearCombination":
        return self + (-other)

    def scale(self, factor: int) -> "LinearCombination":
        return LinearCombination({var: coeff * factor for var, coeff in self.terms.items()})

    def is_zero(self) -> bool:
        return not self.terms

    def __repr__(self) -> str:
        return " + ".join(f"{c}*{v!r}" for v, c in self.terms.items()) or "0"


@dataclass
class Constraint:
    a: LinearCombination
    b: LinearCombination
    c: LinearCombination
    annotation: str


class ConstraintSystem:
    """Rank-1 constraint system with an attached assignment."""

    def __init__(self):
        self.input_values: List[int] = [1]
        self.aux_values: List[int] = []
        self.constraints: List[Constraint] = []

    @property
    def num_inputs(self) -> int:
        """Public inputs including the constant one."""
        return len(self.input_values)

    @property
    def num_aux(self) -> int:
        return len(self.aux_values)

    @property
    def num_variables(self) -> int:
        return self.num_inputs + self.num_aux

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)

    def alloc(self, value: int) -> Variable:
        """Allocate a private wire."""
        self.aux_values.append(value % MODULUS)
        return Variable(AUX, len(self.aux_values) - 1)

    def alloc_input(self, value: int) -> Variable:
        """Allocate a public wire."""
        self.input_values.append(value % MODULUS)
        return Variable(INPUT, len(self.input_values) - 1)

    def enforce(
        self,
        a: LinearCombination,
        b: LinearCombination,
        c: LinearCombination,
        annotation: str,
    ) -> None:
        self.constraints.append(Constraint(a, b, c, annotation))

    def value_of(self, var: Variable) -> int:
        if var.kind == INPUT:
            return self.input_values[var.index]
        return self.aux_values[var.index]

    def evaluate(self, lc: LinearCombination) -> int:
        total = 0
        for var, coeff in lc.terms.items():
            total += coeff * self.value_of(var)
        return total % MODULUS

    def which_is_unsatisfied(self) -> Optional[str]:
        """Annotation of the first violated constraint, or ``None``."""
        for constraint in self.constraints:
            lhs = self.evaluate(constraint.a) * self.evaluate(constraint.b) % MODULUS
            if lhs != self.evaluate(constraint.c):
                return constraint.annotation
        return None

    def is_satisfied(self) -> bool:
        return self.which_is_unsatisfied() is None

    def z_index(self, var: Variable) -> int:
        """Position of ``var`` in ``z = [1, inputs..., aux...]``."""
        if var.kind == INPUT:
            return var.index
        return self.num_inputs + var.index

    def assignment(self) -> List[int]:
        return self.input_values + self.aux_values

    def matrices(self) -> Tuple[List[List[Tuple[int, int]]], ...]:
        """
        Sparse A, B and C rows indexed by ``z`` position.

        One extra row per public input (``input_j * 0 = 0``) is appended so
        the input polynomials stay linearly independent.
        """
        a_rows, b_rows, c_rows = [], [], []
        for constraint in self.constraints:
            a_rows.append(self._row(constraint.a))
            b_rows.append(self._row(constraint.b))
            c_rows.append(self._row(constraint.c))
        for j in range(self.num_inputs):
            a_rows.append([(j, 1)])
            b_rows.append([])
            c_rows.append([])
        return a_rows, b_rows, c_rows

    def _row(self, lc: LinearCombination) -> List[Tuple[int, int]]:
        return [(self.z_index(var), coeff) for var, coeff in lc.terms.items()]


@dataclass(frozen=True)
class Bit:
    """A boolean value as a linear combination; constants carry no wire."""

    lc: LinearCombination
    value: int
    is_constant: bool = False

    @classmethod
    def constant(cls, value: bool) -> "Bit":
        return cls(LinearCombination.constant(int(value)), int(value), True)

    @classmethod
    def alloc(cls, cs: ConstraintSystem, value: int, annotation: str) -> "Bit":
        if value not in (0, 1):
            raise ValueError(f"bit value must be 0 or 1, got {value}")
        var = cs.alloc(value)
        lc = LinearCombination.of(var)
        cs.enforce(lc, lc, lc, f"{annotation} is boolean")
        return cls(lc, value)


def xor(cs: ConstraintSystem, a: Bit, b: Bit, annotation: str) -> Bit:
    """``c = a xor b`` via ``(2a) * b = a + b - c``; one constraint."""
    if a.is_constant:
        a, b = b, a
    if b.is_constant:
        if b.value == 0:
            return a
        return Bit(LinearCombination.constant(1) - a.lc, 1 - a.value, a.is_constant)
    value = a.value ^ b.value
    c = LinearCombination.of(cs.alloc(value))
    cs.enforce(a.lc.scale(2), b.lc, a.lc + b.lc - c, annotation)
    return Bit(c, value)


class UInt8:
    """Eight bits, least significant first."""

    def __init__(self, bits: Sequence[Bit]):
        if len(bits) != 8:
            raise ValueError("UInt8 needs exactly 8 bits")
        self.bits = list(bits)

    @classmethod
    def constant(cls, value: int) -> "UInt8":
        return cls([Bit.constant((value >> i) & 1) for i in range(8)])

    @classmethod
    def alloc(cls, cs: ConstraintSystem, value: int, annotation: str) -> "UInt8":
        return cls([Bit.alloc(cs, (value >> i) & 1, f"{annotation} bit {i}") for i in range(8)])

    @classmethod
    def alloc_bytes(cls, cs: ConstraintSystem, data: bytes, annotation: str) -> List["UInt8"]:
        return [cls.alloc(cs, byte, f"{annotation} byte {i}") for i, byte in enumerate(data)]

    def xor(self, cs: ConstraintSystem, other: "UInt8", annotation: str) -> "UInt8":
        return UInt8(
            [xor(cs, a, b, f"{annotation} bit {i}") for i, (a, b) in enumerate(zip(self.bits, other.bits))]
        )

    @property
    def value(self) -> int:
        return sum(bit.value << i for i, bit in enumerate(self.bits))


def bytes_value(data: Iterable[UInt8]) -> bytes:
    return bytes(byte.value for byte in data)


class XorFoldGadget:
    """In-circuit counterpart of ``XorFoldHasher``.

    Byte ``i`` of the input is XORed into output position ``i % 32``. Each
    position holding a single input byte reuses that byte's wires, so only
    the folded positions cost constraints.
    """

    def __init__(self, annotation: str = "xor-fold"):
        self.annotation = annotation

    def digest(self, cs: ConstraintSystem, data: Sequence[UInt8]) -> List[UInt8]:
        out: List[Optional[UInt8]] = [None] * DIGEST_SIZE
        for i, byte in enumerate(data):
            pos = i % DIGEST_SIZE
            if out[pos] is None:
                out[pos] = byte
            else:
                out[pos] = out[pos].xor(cs, byte, f"{self.annotation} input byte {i}")
        return [byte if byte is not None else UInt8.constant(0) for byte in out]


def chunk_field_elements(data: bytes) -> List[int]:
    """Split into 31-byte chunks, zero-pad each to 32 bytes, read little-endian."""
    return [
        int.from_bytes(data[i : i + CHUNK_BYTES].ljust(32, b"\x00"), "little") % MODULUS
        for i in range(0, len(data), CHUNK_BYTES)
    ]


def enforce_packed_equals_inputs(
    cs: ConstraintSystem, data: Sequence[UInt8], inputs: Sequence[Variable], annotation: str
) -> None:
    """Bind digest bits to public chunk inputs: ``(sum 2^k b_k) * 1 = input``."""
    chunks = [data[i : i + CHUNK_BYTES] for i in range(0, len(data), CHUNK_BYTES)]
    if len(chunks) != len(inputs):
        raise ValueError("chunk count does not match public inputs")
    for n, (chunk, var) in enumerate(zip(chunks, inputs)):
        packed = LinearCombination.zero()
        for k, byte in enumerate(chunk):
            for j, bit in enumerate(byte.bits):
                packed = packed + bit.lc.scale(1 << (8 * k + j))
        cs.enforce(
            packed,
            LinearCombination.constant(1),
            LinearCombination.of(var),
            f"{annotation} chunk {n} matches public input",
        )


class PrivateTransferCircuit:
    """
    Proves knowledge of a note behind a public (nullifier, commitment).

    Enforces ``H(amount || asset_id || randomness) == commitment`` and
    ``H(commitment || secret) == nullifier`` with the XOR-fold gadget.
    Public inputs are the nullifier chunks followed by the commitment chunks.
    """

    def __init__(
        self,
        nullifier: bytes,
        commitment: bytes,
        amount: int,
        asset_id: int,
        randomness: bytes,
        secret: bytes,
    ):
        self.nullifier = bytes(nullifier)
        self.commitment = bytes(commitment)
        self.amount = amount
        self.asset_id = asset_id
        self.randomness = bytes(randomness)
        self.secret = bytes(secret)

    @classmethod
    def empty(cls) -> "PrivateTransferCircuit":
        """Zero-filled instance used for trusted setup."""
        return cls(
            nullifier=bytes(DIGEST_SIZE),
            commitment=bytes(DIGEST_SIZE),
            amount=0,
            asset_id=0,
            randomness=bytes(RANDOMNESS_BYTES),
            secret=bytes(SECRET_BYTES),
        )

    @classmethod
    def from_witness(cls, witness, statement) -> "PrivateTransferCircuit":
        return cls(
            nullifier=statement.nullifier,
            commitment=statement.commitment,
            amount=witness.amount,
            asset_id=witness.asset_id,
            randomness=witness.randomness,
            secret=witness.secret,
        )

    def synthesize(self, cs: Optional[ConstraintSystem] = None) -> ConstraintSystem:
        cs = cs or ConstraintSystem()

        nullifier_inputs = [cs.alloc_input(v) for v in chunk_field_elements(self.nullifier)]
        commitment_inputs = [cs.alloc_input(v) for v in chunk_field_elements(self.commitment)]

        amount = UInt8.alloc_bytes(cs, self.amount.to_bytes(AMOUNT_BYTES, "little"), "amount")
        asset_id = UInt8.alloc_bytes(
            cs, self.asset_id.to_bytes(ASSET_ID_BYTES, "little"), "asset_id"
        )
        randomness = UInt8.alloc_bytes(cs, self.randomness, "randomness")
        secret = UInt8.alloc_bytes(cs, self.secret, "secret")

        commitment = XorFoldGadget("commitment").digest(cs, amount + asset_id + randomness)
        enforce_packed_equals_inputs(cs, commitment, commitment_inputs, "commitment")

        nullifier = XorFoldGadget("nullifier").digest(cs, commitment + secret)
        enforce_packed_equals_inputs(cs, nullifier, nullifier_inputs, "nullifier")
        return cs

    def check_satisfied(self) -> ConstraintSystem:
        """Synthesize and raise ``ConstraintUnsatisfied`` on the first violation."""
        cs = self.synthesize()
        failing = cs.which_is_unsatisfied()
        if failing is not None:
            raise ConstraintUnsatisfied(
                f"Witness does not satisfy constraint: {failing}",
                constraint=failing,
                algorithm="groth16",
            )
        return cs


def circuit_info(cs: Optional[ConstraintSystem] = None) -> Dict[str, int]:
    """Shape summary of the transfer circuit."""
    cs = cs or PrivateTransferCircuit.empty().synthesize()
    return {
        "num_constraints": cs.num_constraints,
        "num_inputs": cs.num_inputs,
        "num_aux": cs.num_aux,
        "num_variables": cs.num_variables,
        "num_public_field_elements": cs.num_inputs - 1,
    }
