"""
Canonical byte encodings of proofs and keys.

All points use the standard compressed BLS12-381 encoding (48 bytes in G1,
96 bytes in G2). Counts are little-endian u64. Decoders reject trailing
bytes, off-curve points and, unless disabled, points outside the
prime-order subgroup.
"""

import struct
from typing import Callable, List, Tuple

from ...errors import SerializationError
from .curve import (
    G1_COMPRESSED_SIZE,
    G2_COMPRESSED_SIZE,
    Point,
    compress_g1,
    compress_g2,
    decompress_g1,
    decompress_g2,
)
from .generation import Proof, ProvingKey, VerifyingKey

PROOF_SIZE = G1_COMPRESSED_SIZE + G2_COMPRESSED_SIZE + G1_COMPRESSED_SIZE
_COUNT = struct.Struct("<Q")
_PK_HEADER = struct.Struct("<QQQ")


class _Reader:
    """Cursor over a byte string that raises ``SerializationError`` on underrun."""

    def __init__(self, data: bytes, what: str):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise SerializationError(f"{what} must be bytes, got {type(data).__name__}")
        self.data = bytes(data)
        self.offset = 0
        self.what = what

    def take(self, size: int) -> bytes:
        end = self.offset + size
        if end > len(self.data):
            raise SerializationError(
                f"Truncated {self.what}: need {end} bytes, have {len(self.data)}"
            )
        chunk = self.data[self.offset : end]
        self.offset = end
        return chunk

    def count(self, item_size: int) -> int:
        (n,) = _COUNT.unpack(self.take(_COUNT.size))
        if n * item_size > len(self.data) - self.offset:
            raise SerializationError(f"Declared count {n} exceeds {self.what} length")
        return n

    def finish(self) -> None:
        if self.offset != len(self.data):
            raise SerializationError(
                f"{len(self.data) - self.offset} trailing bytes after {self.what}"
            )


def _encode_points(points: List[Point], encode: Callable[[Point], bytes]) -> bytes:
    return _COUNT.pack(len(points)) + b"".join(encode(p) for p in points)


def _decode_points(
    reader: _Reader, size: int, decode: Callable[[bytes, bool], Point], check: bool
) -> List[Point]:
    n = reader.count(size)
    return [decode(reader.take(size), check) for _ in range(n)]


def encode_proof(proof: Proof) -> bytes:
    """``A (48) || B (96) || C (48)``."""
    try:
        return compress_g1(proof.a) + compress_g2(proof.b) + compress_g1(proof.c)
    except (ValueError, TypeError, AttributeError) as e:
        raise SerializationError(f"Cannot encode proof: {e}", algorithm="groth16", cause=e) from e


def decode_proof(data: bytes, check_subgroup: bool = True) -> Proof:
    reader = _Reader(data, "proof")
    if len(reader.data) != PROOF_SIZE:
        raise SerializationError(
            f"Proof must be {PROOF_SIZE} bytes, got {len(reader.data)}", algorithm="groth16"
        )
    a = decompress_g1(reader.take(G1_COMPRESSED_SIZE), check_subgroup)
    b = decompress_g2(reader.take(G2_COMPRESSED_SIZE), check_subgroup)
    c = decompress_g1(reader.take(G1_COMPRESSED_SIZE), check_subgroup)
    reader.finish()
    return Proof(a=a, b=b, c=c)


def serialize_vk(vk: VerifyingKey) -> bytes:
    """``alpha_g1 || beta_g2 || gamma_g2 || delta_g2 || u64 count || ic...``."""
    try:
        return (
            compress_g1(vk.alpha_g1)
            + compress_g2(vk.beta_g2)
            + compress_g2(vk.gamma_g2)
            + compress_g2(vk.delta_g2)
            + _encode_points(vk.ic, compress_g1)
        )
    except (ValueError, TypeError, AttributeError) as e:
        raise SerializationError(f"Cannot encode verifying key: {e}", cause=e) from e


def _read_vk(reader: _Reader, check: bool) -> VerifyingKey:
    alpha_g1 = decompress_g1(reader.take(G1_COMPRESSED_SIZE), check)
    beta_g2 = decompress_g2(reader.take(G2_COMPRESSED_SIZE), check)
    gamma_g2 = decompress_g2(reader.take(G2_COMPRESSED_SIZE), check)
    delta_g2 = decompress_g2(reader.take(G2_COMPRESSED_SIZE), check)
    ic = _decode_points(reader, G1_COMPRESSED_SIZE, decompress_g1, check)
    if not ic:
        raise SerializationError("Verifying key has no input commitments")
    return VerifyingKey(alpha_g1, beta_g2, gamma_g2, delta_g2, ic)


def deserialize_vk(data: bytes, check_subgroup: bool = True) -> VerifyingKey:
    reader = _Reader(data, "verifying key")
    vk = _read_vk(reader, check_subgroup)
    reader.finish()
    return vk


def serialize_pk(pk: ProvingKey) -> bytes:
    """Encode a proving key for distribution to provers."""
    try:
        return b"".join(
            [
                _PK_HEADER.pack(pk.num_inputs, pk.num_aux, pk.domain_size),
                serialize_vk(pk.vk),
                compress_g1(pk.beta_g1),
                compress_g1(pk.delta_g1),
                _encode_points(pk.a_query, compress_g1),
                _encode_points(pk.b_g1_query, compress_g1),
                _encode_points(pk.b_g2_query, compress_g2),
                _encode_points(pk.h_query, compress_g1),
                _encode_points(pk.l_query, compress_g1),
            ]
        )
    except (ValueError, TypeError, AttributeError) as e:
        raise SerializationError(f"Cannot encode proving key: {e}", cause=e) from e


def deserialize_pk(data: bytes, check_subgroup: bool = False) -> ProvingKey:
    """Decode a proving key.

    Subgroup checks are off by default: a proving key only affects the
    prover that loads it, and checking thousands of points is slow.
    """
    reader = _Reader(data, "proving key")
    num_inputs, num_aux, domain_size = _PK_HEADER.unpack(reader.take(_PK_HEADER.size))
    vk = _read_vk(reader, check_subgroup)
    beta_g1 = decompress_g1(reader.take(G1_COMPRESSED_SIZE), check_subgroup)
    delta_g1 = decompress_g1(reader.take(G1_COMPRESSED_SIZE), check_subgroup)
    queries: Tuple[List[Point], ...] = tuple(
        _decode_points(reader, size, decode, check_subgroup)
        for size, decode in (
            (G1_COMPRESSED_SIZE, decompress_g1),
            (G1_COMPRESSED_SIZE, decompress_g1),
            (G2_COMPRESSED_SIZE, decompress_g2),
            (G1_COMPRESSED_SIZE, decompress_g1),
            (G1_COMPRESSED_SIZE, decompress_g1),
        )
    )
    reader.finish()
    a_query, b_g1_query, b_g2_query, h_query, l_query = queries
    num_vars = num_inputs + num_aux
    if (
        len(a_query) != num_vars
        or len(b_g1_query) != num_vars
        or len(b_g2_query) != num_vars
        or len(l_query) != num_aux
        or len(h_query) != domain_size - 1
        or len(vk.ic) != num_inputs
    ):
        raise SerializationError("Proving key sections disagree with its header")
    return ProvingKey(
        vk=vk,
        beta_g1=beta_g1,
        delta_g1=delta_g1,
        a_query=a_query,
        b_g1_query=b_g1_query,
        b_g2_query=b_g2_query,
        h_query=h_query,
        l_query=l_query,
        num_inputs=num_inputs,
        num_aux=num_aux,
        domain_size=domain_size,
    )
