"""
Unit tests for hash engines.
"""

import pytest

from shieldpool.crypto.hashing import (
    Blake2sHasher,
    Hash,
    XorFoldHasher,
    available_hash_engines,
    default_hash_engine,
    get_hash_engine,
)
from shieldpool.errors import ConfigurationError


class TestHash:
    """Test the Hash value type."""

    def test_hash_requires_32_bytes(self):
        """Test that other lengths are rejected."""
        with pytest.raises(ValueError, match="exactly 32 bytes"):
            Hash(b"\x00" * 31)

    def test_hash_hex_round_trip(self):
        """Test hex conversion."""
        h = Hash(bytes(range(32)))
        assert Hash.from_hex(h.to_hex()) == h
        assert str(h) == bytes(range(32)).hex()

    def test_hash_zero_and_ordering(self):
        """Test zero hash and comparisons."""
        zero = Hash.zero()
        other = Hash(b"\x00" * 31 + b"\x01")
        assert zero.value == b"\x00" * 32
        assert zero < other
        assert other >= zero
        assert len({zero, Hash.zero(), other}) == 2


class TestXorFoldHasher:
    """Test the placeholder XOR-fold engine."""

    def test_empty_input(self):
        """Test that empty input digests to zeros."""
        assert XorFoldHasher().digest(b"") == b"\x00" * 32

    def test_short_input_is_copied(self):
        """Test that inputs under 32 bytes are zero-padded."""
        assert XorFoldHasher().digest(b"\x05\x06") == b"\x05\x06" + b"\x00" * 30

    def test_folding(self):
        """Test that byte i lands at position i % 32."""
        data = bytes([1] * 32 + [3] + [0] * 31)
        expected = bytes([1 ^ 3] + [1] * 31)
        assert XorFoldHasher().digest(data) == expected

    def test_commutative_pairing(self):
        """Test the known weakness: swapping 32-byte halves keeps the digest."""
        engine = XorFoldHasher()
        a, b = b"\x11" * 32, b"\x22" * 32
        assert engine.digest(a + b) == engine.digest(b + a)

    def test_deterministic(self):
        """Test identical input gives identical output."""
        engine = XorFoldHasher()
        assert engine.digest(b"shieldpool") == engine.digest(b"shieldpool")
        assert engine.hash(b"shieldpool") == Hash(engine.digest(b"shieldpool"))

    def test_flagged_insecure(self):
        """Test the engine reports itself as insecure."""
        assert not XorFoldHasher.is_cryptographically_secure


class TestBlake2sHasher:
    """Test the BLAKE2s engine."""

    def test_known_vector(self):
        """Test BLAKE2s-256 of the empty string."""
        assert Blake2sHasher().digest(b"").hex() == (
            "69217a3079908094e11121d042354a7c1f55b6482ca1a51e1b250dfd1ed0eef9"
        )

    def test_order_sensitive(self):
        """Test that swapping halves changes the digest."""
        engine = Blake2sHasher()
        a, b = b"\x11" * 32, b"\x22" * 32
        assert engine.digest(a + b) != engine.digest(b + a)

    def test_digest_many(self):
        """Test digest of concatenated parts."""
        engine = Blake2sHasher()
        assert engine.digest_many([b"ab", b"cd"]) == engine.digest(b"abcd")


class TestRegistry:
    """Test engine lookup."""

    def test_lookup(self):
        """Test known names."""
        assert isinstance(get_hash_engine("xor-fold"), XorFoldHasher)
        assert isinstance(get_hash_engine("blake2s"), Blake2sHasher)
        assert available_hash_engines() == ["blake2s", "xor-fold"]

    def test_unknown_engine(self):
        """Test unknown names raise ConfigurationError."""
        with pytest.raises(ConfigurationError) as exc_info:
            get_hash_engine("sha3")
        assert exc_info.value.field == "hash_engine"

    def test_default_is_xor_fold(self):
        """Test the default engine matches the circuit gadget."""
        assert isinstance(default_hash_engine(), XorFoldHasher)
