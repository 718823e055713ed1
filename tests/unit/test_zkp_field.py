"""
Unit tests for scalar field arithmetic and evaluation domains.
"""

import random

import pytest

from shieldpool.crypto.zkp.field import (
    MODULUS,
    EvaluationDomain,
    batch_inverse,
    fr,
    inv,
    root_of_unity,
)


def poly_eval(coeffs, x):
    result = 0
    for c in reversed(coeffs):
        result = (result * x + c) % MODULUS
    return result


class TestScalarField:
    """Test basic field operations."""

    def test_fr_reduces(self):
        """Test reduction into the field."""
        assert fr(MODULUS + 5) == 5
        assert fr(-1) == MODULUS - 1

    def test_inverse(self):
        """Test x * inv(x) == 1."""
        for x in (1, 2, 7, MODULUS - 1, 123456789):
            assert x * inv(x) % MODULUS == 1

    def test_inverse_of_zero(self):
        """Test zero has no inverse."""
        with pytest.raises(ZeroDivisionError):
            inv(0)
        with pytest.raises(ZeroDivisionError):
            inv(MODULUS)

    def test_batch_inverse(self):
        """Test batch inversion matches single inversions."""
        values = [3, 5, 11, MODULUS - 2]
        assert batch_inverse(values) == [inv(v) for v in values]

    def test_batch_inverse_empty(self):
        """Test empty input."""
        assert batch_inverse([]) == []


class TestRootOfUnity:
    """Test roots of unity."""

    @pytest.mark.parametrize("size", [2, 4, 1024, 2048])
    def test_primitive(self, size):
        """Test omega^n == 1 and omega^(n/2) != 1."""
        omega = root_of_unity(size)
        assert pow(omega, size, MODULUS) == 1
        assert pow(omega, size // 2, MODULUS) != 1

    def test_size_one(self):
        """Test the trivial root."""
        assert root_of_unity(1) == 1

    @pytest.mark.parametrize("size", [0, 3, 1000])
    def test_not_power_of_two(self, size):
        """Test non powers of two are rejected."""
        with pytest.raises(ValueError):
            root_of_unity(size)

    def test_exceeds_two_adicity(self):
        """Test sizes beyond 2^32 are rejected."""
        with pytest.raises(ValueError):
            root_of_unity(1 << 33)


class TestEvaluationDomain:
    """Test FFTs over the domain and its coset."""

    def test_size_rounds_up(self):
        """Test the domain size is the next power of two."""
        assert EvaluationDomain(1097).size == 2048
        assert EvaluationDomain(8).size == 8
        assert EvaluationDomain(0).size == 2

    def test_fft_evaluates_polynomial(self):
        """Test FFT output matches direct evaluation."""
        domain = EvaluationDomain(8)
        coeffs = [3, 1, 4, 1, 5, 9, 2, 6]
        evals = domain.fft(coeffs)
        for w, value in zip(domain.elements(), evals):
            assert value == poly_eval(coeffs, w)

    def test_ifft_inverts_fft(self):
        """Test ifft(fft(p)) == p."""
        rng = random.Random(1)
        domain = EvaluationDomain(16)
        coeffs = [rng.randrange(MODULUS) for _ in range(16)]
        assert domain.ifft(domain.fft(coeffs)) == coeffs

    def test_short_input_is_padded(self):
        """Test fewer coefficients than points are zero-padded."""
        domain = EvaluationDomain(8)
        assert domain.ifft(domain.fft([1, 2])) == [1, 2, 0, 0, 0, 0, 0, 0]

    def test_too_many_values(self):
        """Test input longer than the domain is rejected."""
        with pytest.raises(ValueError):
            EvaluationDomain(4).fft([1] * 5)

    def test_coset_fft(self):
        """Test coset evaluations are taken at g * omega^i."""
        domain = EvaluationDomain(8)
        coeffs = [2, 7, 1, 8]
        evals = domain.coset_fft(coeffs)
        for w, value in zip(domain.elements(), evals):
            assert value == poly_eval(coeffs, domain.coset_generator * w % MODULUS)
        assert domain.coset_ifft(evals)[:4] == coeffs

    def test_vanishing_polynomial(self):
        """Test t vanishes on the domain and not on the coset."""
        domain = EvaluationDomain(8)
        assert all(domain.vanishing_at(w) == 0 for w in domain.elements())
        assert domain.vanishing_at(domain.coset_generator) != 0

    def test_divide_by_vanishing(self):
        """Test h is recovered from coset evaluations of h * t."""
        domain = EvaluationDomain(8)
        evals = []
        for w in domain.elements():
            x = domain.coset_generator * w % MODULUS
            evals.append(3 * domain.vanishing_at(x) % MODULUS)
        quotient = domain.coset_ifft(domain.divide_by_vanishing_on_coset(evals))
        assert quotient == [3, 0, 0, 0, 0, 0, 0, 0]

    def test_lagrange_basis(self):
        """Test Lagrange values sum to one and interpolate."""
        domain = EvaluationDomain(8)
        tau = 987654321
        lagrange = domain.lagrange_at(tau)
        assert sum(lagrange) % MODULUS == 1

        evals = [5, 0, 2, 9, 1, 1, 4, 3]
        coeffs = domain.ifft(evals)
        interpolated = sum(e * l for e, l in zip(evals, lagrange)) % MODULUS
        assert interpolated == poly_eval(coeffs, tau)

    def test_lagrange_inside_domain(self):
        """Test evaluation points inside the domain are rejected."""
        domain = EvaluationDomain(8)
        with pytest.raises(ValueError):
            domain.lagrange_at(domain.omega)
