"""
Injected randomness sources.

Setup, proving and note generation take a source object exposing
``randrange(start, stop)``. Production code gets a fresh
``secrets.SystemRandom`` per call so concurrent callers never share
generator state; tests pass ``seeded_random_source`` for reproducibility.
"""

import random
import secrets
from typing import Protocol


class RandomSource(Protocol):
    def randrange(self, start: int, stop: int) -> int:
        ...


def default_random_source() -> RandomSource:
    return secrets.SystemRandom()


def seeded_random_source(seed: int) -> RandomSource:
    """Deterministic source for tests. Never use it to produce real keys."""
    return random.Random(seed)


def random_bytes(rng: RandomSource, size: int) -> bytes:
    return rng.randrange(0, 1 << (8 * size)).to_bytes(size, "little")


def random_nonzero_scalar(rng: RandomSource, modulus: int) -> int:
    return rng.randrange(1, modulus)
