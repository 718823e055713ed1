"""
Integration tests for the shielded pool.

End-to-end flows from trusted setup through deposit and withdrawal,
including concurrent redemption of the same note.
"""

import logging

logger = logging.getLogger(__name__)
import threading

import pytest

from shieldpool.bridge import EventType, PrivacyBridge
from shieldpool.crypto.notes import generate_note
from shieldpool.crypto.randomness import seeded_random_source
from shieldpool.crypto.zkp import (
    PublicStatement,
    TransferWitness,
    deserialize_vk,
    serialize_vk,
)
from shieldpool.errors import InvalidProof, NullifierAlreadyUsed
from shieldpool.logging import LogConfig, LogManager


@pytest.fixture
def pool(backend, verifying_key):
    manager = LogManager(LogConfig(handlers=["memory"]))
    bridge = PrivacyBridge(backend=backend, logger=manager.get_logger("shieldpool.bridge"))
    bridge.set_verifying_key(serialize_vk(verifying_key))
    return bridge


class TestShieldedPoolIntegration:
    """Test complete shielded pool workflows."""

    def test_deposit_prove_withdraw(self, pool, backend, proving_key):
        """Test a generated note can be deposited and redeemed once."""
        rng = seeded_random_source(2024)
        note, secret = generate_note(5000, 0, rng)

        commitment = pool.deposit("alice", note.amount, note.asset_id, note.randomness)
        assert commitment == note.commitment
        assert pool.inclusion_proof(commitment).verify()

        witness = TransferWitness.from_note(note, secret)
        statement = PublicStatement.from_note(note)
        proof = backend.generate_proof(proving_key, witness, statement, rng)

        pool.withdraw(note.nullifier, note.commitment, proof, note.asset_id)
        assert pool.is_spent(note.nullifier)

        with pytest.raises(NullifierAlreadyUsed):
            pool.withdraw(note.nullifier, note.commitment, proof, note.asset_id)

        logger.info("Withdrawal events: %s", [e.to_dict() for e in pool.events()])
        kinds = [e.event_type for e in pool.events()]
        assert kinds == [
            EventType.VERIFYING_KEY_SET,
            EventType.ASSET_SHIELDED,
            EventType.ASSET_UNSHIELDED,
        ]
        sequences = [e.sequence for e in pool.events()]
        assert sequences == sorted(sequences)

    def test_proof_for_other_note_rejected(self, pool, scenario, scenario_proof):
        """Test a valid proof cannot redeem a different deposited note."""
        _, statement = scenario
        other_commitment = pool.deposit("bob", 77, 0, b"\x09" * 32)
        pool.deposit("alice", 100, 0, b"\x01" * 32)
        with pytest.raises(InvalidProof):
            pool.withdraw(statement.nullifier, other_commitment, scenario_proof, 0)

    def test_concurrent_withdrawals(self, pool, scenario, scenario_proof):
        """Test only one of several racing withdrawals succeeds."""
        _, statement = scenario
        pool.deposit("alice", 100, 0, b"\x01" * 32)

        outcomes = []
        lock = threading.Lock()

        def attempt():
            try:
                pool.withdraw(statement.nullifier, statement.commitment, scenario_proof, 0)
                result = "ok"
            except NullifierAlreadyUsed:
                result = "spent"
            with lock:
                outcomes.append(result)

        threads = [threading.Thread(target=attempt) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert outcomes.count("ok") == 1
        assert outcomes.count("spent") == 3

    def test_verifying_key_distribution(self, backend, verifying_key, scenario, scenario_proof):
        """Test a key shipped as bytes verifies the same proofs."""
        _, statement = scenario
        restored = deserialize_vk(serialize_vk(verifying_key))
        assert backend.verify_proof(restored, scenario_proof, statement)
