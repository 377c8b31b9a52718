"""Deterministic seeding utilities.

All randomness in the library flows through explicitly passed RNGs so that
rollouts are fully reproducible given the same seeds.  There is no
module-level generator: a caller that wants a process-wide default has to
create it and thread it through.
"""

from __future__ import annotations

from typing import Union

import numpy as np

Seed = Union[int, np.random.Generator, None]


def make_rng(seed: int | None = None) -> np.random.Generator:
    """Create a NumPy Generator from an explicit seed.

    If seed is None a fresh (non-reproducible) generator is returned.
    """
    return np.random.default_rng(seed)


def as_rng(seed: Seed = None) -> np.random.Generator:
    """Coerce a seed-like value into a Generator.

    Generators are returned as-is (and therefore advanced by the caller),
    integers seed a new generator, None gives a fresh one.
    """
    if isinstance(seed, np.random.Generator):
        return seed
    return make_rng(seed)


def derive_seed(parent_seed: int, index: int) -> int:
    """Derive a child seed deterministically from a parent seed + index.

    Used to give every copy of an environment or policy its own RNG while
    keeping the whole rollout reproducible from one root seed.
    """
    ss = np.random.SeedSequence(parent_seed).spawn(index + 1)
    return int(ss[-1].generate_state(1)[0])


def fresh_seed() -> int:
    """Draw a new, non-reproducible root seed from OS entropy."""
    return int(np.random.SeedSequence().generate_state(1)[0])
