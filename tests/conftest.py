"""Shared fixtures for shieldpool tests."""

import pytest

from shieldpool.crypto.notes import commit, nullify
from shieldpool.crypto.randomness import seeded_random_source
from shieldpool.crypto.zkp import Groth16Backend, PublicStatement, TransferWitness

AMOUNT = 100
ASSET_ID = 0
RANDOMNESS = b"\x01" * 32
SECRET = b"\x02" * 32


@pytest.fixture(scope="session")
def backend():
    return Groth16Backend()


@pytest.fixture(scope="session")
def keys(backend):
    """Trusted setup run once per session with a fixed seed."""
    return backend.setup(seeded_random_source(12345))


@pytest.fixture(scope="session")
def proving_key(keys):
    return keys[0]


@pytest.fixture(scope="session")
def verifying_key(keys):
    return keys[1]


@pytest.fixture(scope="session")
def scenario():
    """Witness and statement for amount=100, asset 0, r=0x01.., secret=0x02.."""
    commitment = commit(AMOUNT, ASSET_ID, RANDOMNESS)
    nullifier = nullify(commitment, SECRET)
    witness = TransferWitness(amount=AMOUNT, asset_id=ASSET_ID, randomness=RANDOMNESS, secret=SECRET)
    statement = PublicStatement(nullifier=nullifier, commitment=commitment)
    return witness, statement


@pytest.fixture(scope="session")
def scenario_proof(backend, proving_key, scenario):
    witness, statement = scenario
    return backend.generate_proof(proving_key, witness, statement, seeded_random_source(7))
