"""
Property-based tests for the shielded pool core using Hypothesis.

These tests check that notes, Merkle proofs and the in-circuit hash keep
their defining properties across a wide range of inputs.
"""

import pytest
from hypothesis import given, settings, strategies as st
from hypothesis.strategies import binary, composite, integers, lists

from shieldpool.crypto.hashing import Blake2sHasher, XorFoldHasher
from shieldpool.crypto.merkle import (
    MerkleAnonymitySet,
    calculate_root,
    generate_proof,
    verify_proof,
)
from shieldpool.crypto.notes import MAX_AMOUNT, MAX_ASSET_ID, commit, commitment_preimage, nullify
from shieldpool.crypto.zkp.circuits import (
    ConstraintSystem,
    PrivateTransferCircuit,
    UInt8,
    XorFoldGadget,
    bytes_value,
)
from shieldpool.errors import ConstraintUnsatisfied

digests = binary(min_size=32, max_size=32)


@composite
def leaves_and_index(draw):
    """A non-empty leaf sequence and an index into it."""
    leaves = draw(lists(digests, min_size=1, max_size=40))
    index = draw(integers(min_value=0, max_value=len(leaves) - 1))
    return leaves, index


@composite
def notes(draw):
    amount = draw(integers(min_value=0, max_value=MAX_AMOUNT))
    asset_id = draw(integers(min_value=0, max_value=MAX_ASSET_ID))
    randomness = draw(digests)
    secret = draw(digests)
    return amount, asset_id, randomness, secret


class TestNoteProperties:
    """Properties of commitments and nullifiers."""

    @given(notes())
    def test_commit_deterministic(self, note):
        """Test equal inputs give equal commitments."""
        amount, asset_id, randomness, _ = note
        assert commit(amount, asset_id, randomness) == commit(amount, asset_id, randomness)

    @given(notes())
    def test_preimage_layout(self, note):
        """Test the preimage is always 52 bytes and decodes back."""
        amount, asset_id, randomness, _ = note
        preimage = commitment_preimage(amount, asset_id, randomness)
        assert len(preimage) == 52
        assert int.from_bytes(preimage[:16], "little") == amount
        assert int.from_bytes(preimage[16:20], "little") == asset_id
        assert preimage[20:] == randomness

    @given(notes(), digests)
    def test_nullifier_depends_on_secret(self, note, other_secret):
        """Test different secrets give different nullifiers."""
        amount, asset_id, randomness, secret = note
        commitment = commit(amount, asset_id, randomness)
        if other_secret != secret:
            assert nullify(commitment, secret) != nullify(commitment, other_secret)


class TestMerkleProperties:
    """Properties of the Merkle tree."""

    @given(leaves_and_index())
    def test_proof_round_trip(self, data):
        """Test every generated proof verifies."""
        leaves, index = data
        root = calculate_root(leaves)
        assert verify_proof(leaves[index], generate_proof(leaves, index), index, root)

    @settings(max_examples=30, deadline=None)
    @given(leaves_and_index(), digests)
    def test_substituted_leaf_fails(self, data, other):
        """Test another leaf does not verify under a real hash."""
        leaves, index = data
        engine = Blake2sHasher()
        root = calculate_root(leaves, engine=engine)
        proof = generate_proof(leaves, index, engine=engine)
        if other != leaves[index]:
            assert not verify_proof(other, proof, index, root, engine)

    @given(lists(digests, max_size=20))
    def test_anonymity_set_matches_pure_root(self, leaves):
        """Test appending one by one gives the batch root."""
        anonymity_set = MerkleAnonymitySet()
        for leaf in leaves:
            anonymity_set.append(leaf)
        assert anonymity_set.root == calculate_root(leaves)

    @given(lists(digests, min_size=1, max_size=20))
    def test_proof_length_bounded(self, leaves):
        """Test proof length is the ceiling log of the leaf count."""
        proof = generate_proof(leaves, len(leaves) - 1)
        assert len(proof) == (len(leaves) - 1).bit_length()


class TestCircuitProperties:
    """Properties of the constraint system."""

    @settings(max_examples=25, deadline=None)
    @given(binary(max_size=96))
    def test_gadget_agrees_with_hasher(self, data):
        """Test the gadget and the native hash agree on any input."""
        cs = ConstraintSystem()
        digest = XorFoldGadget().digest(cs, UInt8.alloc_bytes(cs, data, "data"))
        assert bytes_value(digest) == XorFoldHasher().digest(data)
        assert cs.is_satisfied()

    @settings(max_examples=10, deadline=None)
    @given(notes())
    def test_honest_witness_satisfies(self, note):
        """Test any well-formed note satisfies the transfer circuit."""
        amount, asset_id, randomness, secret = note
        commitment = commit(amount, asset_id, randomness)
        circuit = PrivateTransferCircuit(
            nullify(commitment, secret), commitment, amount, asset_id, randomness, secret
        )
        assert circuit.synthesize().is_satisfied()

    @settings(max_examples=10, deadline=None)
    @given(notes(), integers(min_value=0, max_value=MAX_AMOUNT))
    def test_wrong_amount_unsatisfied(self, note, claimed):
        """Test a witness claiming another amount is rejected."""
        amount, asset_id, randomness, secret = note
        if claimed == amount:
            return
        commitment = commit(amount, asset_id, randomness)
        circuit = PrivateTransferCircuit(
            nullify(commitment, secret), commitment, claimed, asset_id, randomness, secret
        )
        with pytest.raises(ConstraintUnsatisfied):
            circuit.check_satisfied()
