"""
BLS12-381 group helpers for the Groth16 prover and verifier.

Points are ``py_ecc`` projective tuples. Fixed-base tables speed up the
trusted setup, where a handful of generators are multiplied by thousands of
scalars; Pippenger bucketing handles the prover's multi-scalar products.
"""

import logging

logger = logging.getLogger(__name__)
import math
from typing import Any, List, Sequence, Tuple

from py_ecc.bls.g2_primitives import (
    G1_to_pubkey,
    G2_to_signature,
    pubkey_to_G1,
    signature_to_G2,
)
from py_ecc.optimized_bls12_381 import (
    G1,
    G2,
    Z1,
    Z2,
    add,
    curve_order,
    double,
    eq,
    is_inf,
    multiply,
    neg,
)

from ...errors import SerializationError

G1_COMPRESSED_SIZE = 48
G2_COMPRESSED_SIZE = 96
SCALAR_BITS = curve_order.bit_length()

Point = Tuple[Any, Any, Any]


def scalar_mul(point: Point, scalar: int) -> Point:
    return multiply(point, scalar % curve_order)


def is_in_subgroup(point: Point) -> bool:
    """Prime-order subgroup membership: ``r * P`` is the point at infinity."""
    return is_inf(multiply(point, curve_order))


def points_equal(p1: Point, p2: Point) -> bool:
    return eq(p1, p2)


class FixedBaseTable:
    """Windowed multiples of one base point.

    Row ``j`` holds ``k * 2^(w*j) * base`` for every ``k < 2^w``, so a scalar
    multiplication costs one addition per nonzero window digit.
    """

    def __init__(self, base: Point, zero: Point, window: int = 8):
        if window < 1:
            raise ValueError("window must be positive")
        self.window = window
        self.zero = zero
        self._mask = (1 << window) - 1
        rows = -(-SCALAR_BITS // window)
        self._table: List[List[Point]] = []
        row_base = base
        for _ in range(rows):
            row = [zero]
            acc = zero
            for _ in range(self._mask):
                acc = add(acc, row_base)
                row.append(acc)
            self._table.append(row)
            for _ in range(window):
                row_base = double(row_base)

    def mul(self, scalar: int) -> Point:
        scalar %= curve_order
        acc = self.zero
        row = 0
        while scalar:
            digit = scalar & self._mask
            if digit:
                acc = add(acc, self._table[row][digit])
            scalar >>= self.window
            row += 1
        return acc

    def batch_mul(self, scalars: Sequence[int]) -> List[Point]:
        return [self.mul(s) for s in scalars]


def _pippenger(points: Sequence[Point], scalars: Sequence[int], zero: Point, window: int) -> Point:
    num_windows = -(-SCALAR_BITS // window)
    bucket_count = (1 << window) - 1
    result = zero
    for w in range(num_windows - 1, -1, -1):
        for _ in range(window):
            result = double(result)
        shift = w * window
        buckets = [zero] * bucket_count
        for point, scalar in zip(points, scalars):
            digit = (scalar >> shift) & bucket_count
            if digit:
                buckets[digit - 1] = add(buckets[digit - 1], point)
        running = zero
        window_sum = zero
        for bucket in reversed(buckets):
            running = add(running, bucket)
            window_sum = add(window_sum, running)
        result = add(result, window_sum)
    return result


def multi_scalar_mul(
    points: Sequence[Point], scalars: Sequence[int], zero: Point, window: int = 0
) -> Point:
    """
    Compute ``sum(s_i * P_i)``.

    Args:
        points: Base points, all in the same group
        scalars: One scalar per point
        zero: The group's point at infinity
        window: Bucket width in bits; chosen from the input size when 0

    Returns:
        The combined point
    """
    if len(points) != len(scalars):
        raise ValueError("points and scalars differ in length")
    acc = zero
    big_points = []
    big_scalars = []
    for point, scalar in zip(points, scalars):
        scalar %= curve_order
        if scalar == 0:
            continue
        if scalar == 1:
            acc = add(acc, point)
        else:
            big_points.append(point)
            big_scalars.append(scalar)

    if not big_points:
        return acc
    if len(big_points) < 4:
        for point, scalar in zip(big_points, big_scalars):
            acc = add(acc, multiply(point, scalar))
        return acc

    if window <= 0:
        window = max(2, int(math.log2(len(big_points))) - 2)
    return add(acc, _pippenger(big_points, big_scalars, zero, window))


def compress_g1(point: Point) -> bytes:
    return bytes(G1_to_pubkey(point))


def compress_g2(point: Point) -> bytes:
    return bytes(G2_to_signature(point))


def decompress_g1(data: bytes, check_subgroup: bool = True) -> Point:
    """Decode a compressed G1 point, rejecting off-curve and small-order input."""
    if len(data) != G1_COMPRESSED_SIZE:
        raise SerializationError(
            f"G1 point must be {G1_COMPRESSED_SIZE} bytes, got {len(data)}",
            algorithm="bls12-381",
        )
    try:
        point = pubkey_to_G1(bytes(data))
    except (ValueError, AssertionError, TypeError) as e:
        raise SerializationError(f"Invalid G1 point: {e}", algorithm="bls12-381", cause=e) from e
    if check_subgroup and not is_in_subgroup(point):
        raise SerializationError("G1 point outside the prime-order subgroup", algorithm="bls12-381")
    return point


def decompress_g2(data: bytes, check_subgroup: bool = True) -> Point:
    """Decode a compressed G2 point, rejecting off-curve and small-order input."""
    if len(data) != G2_COMPRESSED_SIZE:
        raise SerializationError(
            f"G2 point must be {G2_COMPRESSED_SIZE} bytes, got {len(data)}",
            algorithm="bls12-381",
        )
    try:
        point = signature_to_G2(bytes(data))
    except (ValueError, AssertionError, TypeError) as e:
        raise SerializationError(f"Invalid G2 point: {e}", algorithm="bls12-381", cause=e) from e
    if check_subgroup and not is_in_subgroup(point):
        raise SerializationError("G2 point outside the prime-order subgroup", algorithm="bls12-381")
    return point


__all__ = [
    "G1",
    "G2",
    "Z1",
    "Z2",
    "add",
    "neg",
    "scalar_mul",
    "is_in_subgroup",
    "points_equal",
    "FixedBaseTable",
    "multi_scalar_mul",
    "compress_g1",
    "compress_g2",
    "decompress_g1",
    "decompress_g2",
]
