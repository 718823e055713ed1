#!/usr/bin/env python3
"""
Private Withdrawal Demo for shieldpool

This demo walks through the life of a shielded note:
- Trusted setup of the Groth16 parameters
- Registering an asset and depositing a note
- Proving knowledge of the note without revealing it
- Withdrawing, then attempting a double spend

The setup and each proof take a while in pure Python; expect the demo to
run for a minute or two.
"""

import logging
import time

from shieldpool.bridge import PrivacyBridge
from shieldpool.config import BridgeConfig
from shieldpool.crypto.notes import generate_note
from shieldpool.crypto.zkp import Groth16Backend, PublicStatement, TransferWitness
from shieldpool.errors import InvalidProof, NullifierAlreadyUsed

logger = logging.getLogger(__name__)


class PrivateWithdrawalDemo:
    """Demonstrates a deposit and a private withdrawal."""

    def __init__(self):
        self.backend = Groth16Backend()
        self.bridge = PrivacyBridge(BridgeConfig.from_env(), backend=self.backend)
        self.proving_key = None
        self.note = None
        self.secret = None
        self.proof = None

    def run_setup(self) -> None:
        logger.info("\n🔧 TRUSTED SETUP")
        logger.info("=" * 50)
        start = time.time()
        self.proving_key, verifying_key = self.backend.setup()
        vk_bytes = self.backend.serialize_vk(verifying_key)
        self.bridge.set_verifying_key(vk_bytes)
        logger.info(f"  Setup took {time.time() - start:.1f}s")
        logger.info(f"  Verifying key: {len(vk_bytes)} bytes")
        for key, value in self.backend.get_circuit_info().items():
            logger.info(f"  {key}: {value}")

    def deposit(self) -> None:
        logger.info("\n💰 DEPOSIT")
        logger.info("=" * 50)
        asset = self.bridge.register_asset("eth:usdc", min_deposit=10)
        self.note, self.secret = generate_note(2500, asset.local_id)
        commitment = self.bridge.deposit_registered_asset(
            "alice", "eth:usdc", self.note.amount, self.note.randomness
        )
        logger.info(f"  Commitment: {commitment.hex()}")
        logger.info(f"  Anonymity set root: {self.bridge.merkle_root().hex()}")
        proof = self.bridge.inclusion_proof(commitment)
        logger.info(f"  Leaf {proof.index} included: {proof.verify()}")

    def prove(self) -> None:
        logger.info("\n🔐 PROVE")
        logger.info("=" * 50)
        start = time.time()
        self.proof = self.backend.generate_proof(
            self.proving_key,
            TransferWitness.from_note(self.note, self.secret),
            PublicStatement.from_note(self.note),
        )
        logger.info(f"  Proof of {len(self.proof)} bytes in {time.time() - start:.1f}s")

    def withdraw(self) -> None:
        logger.info("\n🏧 WITHDRAW")
        logger.info("=" * 50)
        self.bridge.withdraw(
            self.note.nullifier, self.note.commitment, self.proof, self.note.asset_id
        )
        logger.info(f"  Nullifier {self.note.nullifier.hex()} consumed")

        try:
            self.bridge.withdraw(
                self.note.nullifier, self.note.commitment, self.proof, self.note.asset_id
            )
        except NullifierAlreadyUsed as e:
            logger.info(f"  Double spend rejected: {e.message}")

        forged = bytes([self.note.nullifier[0] ^ 0xFF]) + self.note.nullifier[1:]
        try:
            self.bridge.withdraw(forged, self.note.commitment, self.proof, self.note.asset_id)
        except InvalidProof as e:
            logger.info(f"  Forged nullifier rejected: {e.message}")

    def show_events(self) -> None:
        logger.info("\n📜 EVENTS")
        logger.info("=" * 50)
        for event in self.bridge.events():
            logger.info(f"  #{event.sequence} {event.event_type.value}")

    def run_demo(self) -> None:
        """Run the complete demo."""
        logger.info("🛡️  SHIELDPOOL PRIVATE WITHDRAWAL DEMO")
        logger.info("=" * 60)
        self.run_setup()
        self.deposit()
        self.prove()
        self.withdraw()
        self.show_events()
        logger.info("\n🎉 DEMO COMPLETED!")


def main():
    """Main demo function."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    PrivateWithdrawalDemo().run_demo()


if __name__ == "__main__":
    main()
