"""
Scalar field arithmetic and radix-2 evaluation domains.

All circuit values live in the BLS12-381 scalar field ``Fr``. The
``EvaluationDomain`` provides the FFTs the prover uses to compute the
quotient polynomial ``h(x) = (a(x)b(x) - c(x)) / t(x)``.
"""

from typing import List, Sequence

from py_ecc.optimized_bls12_381 import curve_order

MODULUS = curve_order
TWO_ADICITY = 32
MULTIPLICATIVE_GENERATOR = 7


def fr(value: int) -> int:
    """Reduce an integer into the scalar field."""
    return value % MODULUS


def inv(value: int) -> int:
    """Multiplicative inverse; raises ``ZeroDivisionError`` for zero."""
    value %= MODULUS
    if value == 0:
        raise ZeroDivisionError("zero has no inverse in Fr")
    return pow(value, MODULUS - 2, MODULUS)


def batch_inverse(values: Sequence[int]) -> List[int]:
    """Montgomery batch inversion; every value must be nonzero."""
    prefix = []
    acc = 1
    for value in values:
        prefix.append(acc)
        acc = acc * value % MODULUS
    acc_inv = inv(acc)
    out = [0] * len(values)
    for i in range(len(values) - 1, -1, -1):
        out[i] = prefix[i] * acc_inv % MODULUS
        acc_inv = acc_inv * values[i] % MODULUS
    return out


def root_of_unity(size: int) -> int:
    """Primitive ``size``-th root of unity; ``size`` must be a power of two."""
    if size < 1 or size & (size - 1):
        raise ValueError(f"domain size {size} is not a power of two")
    if size.bit_length() - 1 > TWO_ADICITY:
        raise ValueError(f"domain size {size} exceeds 2^{TWO_ADICITY}")
    omega = pow(MULTIPLICATIVE_GENERATOR, (MODULUS - 1) // size, MODULUS)
    if size > 1 and pow(omega, size // 2, MODULUS) == 1:
        raise ValueError("generator does not yield a primitive root")
    return omega


def _fft(values: List[int], omega: int) -> List[int]:
    n = len(values)
    out = list(values)
    # bit-reversal permutation
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j |= bit
        if i < j:
            out[i], out[j] = out[j], out[i]

    length = 2
    while length <= n:
        w_len = pow(omega, n // length, MODULUS)
        half = length // 2
        twiddles = [1] * half
        for k in range(1, half):
            twiddles[k] = twiddles[k - 1] * w_len % MODULUS
        for start in range(0, n, length):
            for k in range(half):
                u = out[start + k]
                v = out[start + k + half] * twiddles[k] % MODULUS
                out[start + k] = (u + v) % MODULUS
                out[start + k + half] = (u - v) % MODULUS
        length <<= 1
    return out


class EvaluationDomain:
    """Multiplicative subgroup of size ``2^k`` with its coset by ``g = 7``."""

    def __init__(self, min_size: int):
        size = 1
        while size < max(min_size, 2):
            size <<= 1
        self.size = size
        self.omega = root_of_unity(size)
        self.omega_inv = inv(self.omega)
        self.size_inv = inv(size)
        self.coset_generator = MULTIPLICATIVE_GENERATOR
        self.coset_generator_inv = inv(MULTIPLICATIVE_GENERATOR)

    def elements(self) -> List[int]:
        out = [1] * self.size
        for i in range(1, self.size):
            out[i] = out[i - 1] * self.omega % MODULUS
        return out

    def _pad(self, values: Sequence[int]) -> List[int]:
        if len(values) > self.size:
            raise ValueError("more values than domain points")
        return [v % MODULUS for v in values] + [0] * (self.size - len(values))

    def fft(self, coeffs: Sequence[int]) -> List[int]:
        """Coefficients to evaluations over the domain."""
        return _fft(self._pad(coeffs), self.omega)

    def ifft(self, evals: Sequence[int]) -> List[int]:
        """Evaluations over the domain to coefficients."""
        out = _fft(self._pad(evals), self.omega_inv)
        return [v * self.size_inv % MODULUS for v in out]

    def coset_fft(self, coeffs: Sequence[int]) -> List[int]:
        """Evaluate at ``g * omega^i``."""
        scaled = []
        power = 1
        for c in self._pad(coeffs):
            scaled.append(c * power % MODULUS)
            power = power * self.coset_generator % MODULUS
        return _fft(scaled, self.omega)

    def coset_ifft(self, evals: Sequence[int]) -> List[int]:
        coeffs = self.ifft(evals)
        power = 1
        for i in range(len(coeffs)):
            coeffs[i] = coeffs[i] * power % MODULUS
            power = power * self.coset_generator_inv % MODULUS
        return coeffs

    def vanishing_at(self, point: int) -> int:
        """``t(x) = x^n - 1`` evaluated at ``point``."""
        return (pow(point, self.size, MODULUS) - 1) % MODULUS

    def divide_by_vanishing_on_coset(self, evals: List[int]) -> List[int]:
        """Divide coset evaluations by ``t``, which is the constant ``g^n - 1`` there."""
        t_inv = inv(self.vanishing_at(self.coset_generator))
        return [v * t_inv % MODULUS for v in evals]

    def lagrange_at(self, tau: int) -> List[int]:
        """
        Evaluate every Lagrange basis polynomial of the domain at ``tau``.

        Args:
            tau: Point outside the domain

        Returns:
            ``L_j(tau) = (tau^n - 1) / n * omega^j / (tau - omega^j)`` for each j
        """
        t_tau = self.vanishing_at(tau)
        if t_tau == 0:
            raise ValueError("evaluation point lies in the domain")
        elements = self.elements()
        denominators = batch_inverse([(tau - w) % MODULUS for w in elements])
        scale = t_tau * self.size_inv % MODULUS
        return [scale * w % MODULUS * d % MODULUS for w, d in zip(elements, denominators)]
