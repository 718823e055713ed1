"""
Unit tests for point compression and the proof and key codecs.
"""

import pytest

from shieldpool.crypto.zkp.curve import (
    G1,
    G2,
    Z1,
    FixedBaseTable,
    add,
    compress_g1,
    compress_g2,
    decompress_g1,
    decompress_g2,
    multi_scalar_mul,
    points_equal,
    scalar_mul,
)
from shieldpool.crypto.zkp.generation import Proof
from shieldpool.crypto.zkp.serialization import (
    PROOF_SIZE,
    decode_proof,
    deserialize_pk,
    deserialize_vk,
    encode_proof,
    serialize_pk,
    serialize_vk,
)
from shieldpool.errors import SerializationError


class TestCurveHelpers:
    """Test group helpers."""

    def test_fixed_base_table(self):
        """Test windowed multiplication against plain multiplication."""
        table = FixedBaseTable(G1, Z1, window=4)
        for scalar in (0, 1, 2, 255, 2**200 + 12345):
            assert points_equal(table.mul(scalar), scalar_mul(G1, scalar))

    def test_multi_scalar_mul(self):
        """Test Pippenger agrees with the naive sum."""
        points = [scalar_mul(G1, k) for k in range(1, 7)]
        scalars = [0, 1, 5, 2**130 + 3, 77, 2**250]
        expected = Z1
        for point, scalar in zip(points, scalars):
            expected = add(expected, scalar_mul(point, scalar))
        assert points_equal(multi_scalar_mul(points, scalars, Z1), expected)
        assert points_equal(multi_scalar_mul(points, scalars, Z1, window=3), expected)

    def test_multi_scalar_mul_length_mismatch(self):
        """Test mismatched inputs are rejected."""
        with pytest.raises(ValueError):
            multi_scalar_mul([G1], [1, 2], Z1)

    def test_compression_round_trip(self):
        """Test compressed sizes and decoding."""
        p = scalar_mul(G1, 42)
        q = scalar_mul(G2, 42)
        assert len(compress_g1(p)) == 48
        assert len(compress_g2(q)) == 96
        assert points_equal(decompress_g1(compress_g1(p)), p)
        assert points_equal(decompress_g2(compress_g2(q)), q)

    def test_decompress_rejects_wrong_length(self):
        """Test size checks."""
        with pytest.raises(SerializationError):
            decompress_g1(b"\x00" * 47)
        with pytest.raises(SerializationError):
            decompress_g2(b"\x00" * 48)

    def test_decompress_rejects_invalid_encoding(self):
        """Test bytes without the compression flag are rejected."""
        with pytest.raises(SerializationError):
            decompress_g1(b"\x00" * 48)
        with pytest.raises(SerializationError):
            decompress_g2(b"\x00" * 96)


class TestProofCodec:
    """Test the 192-byte proof encoding."""

    def _proof(self):
        return Proof(a=scalar_mul(G1, 3), b=scalar_mul(G2, 5), c=scalar_mul(G1, 7))

    def test_layout(self):
        """Test A || B || C."""
        proof = self._proof()
        data = encode_proof(proof)
        assert len(data) == PROOF_SIZE == 192
        assert data[:48] == compress_g1(proof.a)
        assert data[48:144] == compress_g2(proof.b)
        assert data[144:] == compress_g1(proof.c)

    def test_decode(self):
        """Test decoding restores the points."""
        proof = self._proof()
        decoded = decode_proof(encode_proof(proof))
        assert points_equal(decoded.a, proof.a)
        assert points_equal(decoded.b, proof.b)
        assert points_equal(decoded.c, proof.c)

    @pytest.mark.parametrize("data", [b"", b"\x00" * 191, b"\x00" * 193, b"\xff" * 192, b"\x00" * 192])
    def test_malformed(self, data):
        """Test malformed proofs raise SerializationError."""
        with pytest.raises(SerializationError):
            decode_proof(data)

    def test_not_bytes(self):
        """Test non-bytes input."""
        with pytest.raises(SerializationError):
            decode_proof("00" * 192)


class TestKeyCodecs:
    """Test verifying and proving key encodings."""

    def test_vk_size(self, verifying_key):
        """Test the encoded key has 5 input commitments and fits the ledger bound."""
        data = serialize_vk(verifying_key)
        assert len(data) == 48 + 3 * 96 + 8 + 5 * 48 == 584
        assert len(data) < 4096

    def test_vk_round_trip(self, verifying_key):
        """Test decoding yields an equal key."""
        decoded = deserialize_vk(serialize_vk(verifying_key))
        assert decoded == verifying_key
        assert decoded.num_public_inputs == 4

    def test_vk_truncated(self, verifying_key):
        """Test truncated keys are rejected."""
        data = serialize_vk(verifying_key)
        with pytest.raises(SerializationError):
            deserialize_vk(data[:-1])

    def test_vk_trailing_bytes(self, verifying_key):
        """Test trailing bytes are rejected."""
        with pytest.raises(SerializationError):
            deserialize_vk(serialize_vk(verifying_key) + b"\x00")

    def test_vk_oversized_count(self, verifying_key):
        """Test a count larger than the remaining bytes is rejected."""
        data = bytearray(serialize_vk(verifying_key))
        data[336:344] = (10**6).to_bytes(8, "little")
        with pytest.raises(SerializationError):
            deserialize_vk(bytes(data))

    def test_vk_empty_ic(self, verifying_key):
        """Test a key without input commitments is rejected."""
        data = serialize_vk(verifying_key)[:336] + (0).to_bytes(8, "little")
        with pytest.raises(SerializationError):
            deserialize_vk(data)

    def test_vk_garbage(self):
        """Test random bytes do not decode."""
        with pytest.raises(SerializationError):
            deserialize_vk(b"\x01" * 584)

    @pytest.mark.slow
    def test_pk_round_trip(self, proving_key):
        """Test the proving key survives encoding."""
        decoded = deserialize_pk(serialize_pk(proving_key))
        assert decoded.shape() == proving_key.shape()
        assert decoded.vk == proving_key.vk
        assert len(decoded.h_query) == proving_key.domain_size - 1
        assert points_equal(decoded.delta_g1, proving_key.delta_g1)

    @pytest.mark.slow
    def test_pk_truncated(self, proving_key):
        """Test truncated proving keys are rejected."""
        with pytest.raises(SerializationError):
            deserialize_pk(serialize_pk(proving_key)[:-48])
