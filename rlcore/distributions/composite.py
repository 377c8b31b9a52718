"""Distributions composed from independent parts.

Composite spaces build their default distributions from these:
``MultiBinary`` and ``Box`` use ``Independent`` over an element-wise base,
``MultiDiscrete`` uses a ``Product`` of differently sized categoricals.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from rlcore.core.errors import PreconditionError
from rlcore.core.seeding import Seed, as_rng
from rlcore.distributions.base import Distribution


class Independent(Distribution[np.ndarray]):
    """Treat the trailing ``event_ndims`` axes of ``base`` as one event.

    Log-probabilities and entropies are summed over those axes.
    """

    def __init__(self, base: Distribution, event_ndims: int = 1) -> None:
        if event_ndims < 0:
            raise PreconditionError("'event_ndims' must be non-negative.")
        self.base = base
        self.event_ndims = event_ndims

    def _reduce(self, x: np.ndarray) -> np.ndarray:
        if self.event_ndims == 0:
            return x
        axes = tuple(range(-self.event_ndims, 0))
        return np.sum(x, axis=axes)

    def log_probability(self, value: np.ndarray) -> np.ndarray:
        return self._reduce(self.base.log_probability(value))

    def entropy(self) -> np.ndarray:
        return self._reduce(self.base.entropy())

    def mode(self, rng: Seed = None) -> np.ndarray:
        return self.base.mode(rng)

    def sample(self, rng: Seed = None) -> np.ndarray:
        return self.base.sample(rng)

    def unstack(self, size: int) -> list[Independent]:
        return [Independent(part, self.event_ndims) for part in self.base.unstack(size)]

    def __repr__(self) -> str:
        return f"Independent({self.base!r}, event_ndims={self.event_ndims})"


class Product(Distribution[np.ndarray]):
    """Joint distribution of independent scalar components.

    Values are arrays whose last axis indexes the components: component
    ``i`` always reads and writes ``value[..., i]``.
    """

    def __init__(self, components: Sequence[Distribution]) -> None:
        if not components:
            raise PreconditionError("A product distribution needs at least one component.")
        self.components = list(components)

    def log_probability(self, value: np.ndarray) -> np.ndarray:
        v = np.asarray(value)
        if v.shape[-1:] != (len(self.components),):
            raise PreconditionError(
                f"Expected a trailing axis of size {len(self.components)}, got shape {v.shape}."
            )
        return sum(c.log_probability(v[..., i]) for i, c in enumerate(self.components))

    def entropy(self) -> np.ndarray:
        return sum(c.entropy() for c in self.components)

    def mode(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        return np.stack([np.asarray(c.mode(rng)) for c in self.components], axis=-1)

    def sample(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        return np.stack([np.asarray(c.sample(rng)) for c in self.components], axis=-1)

    def unstack(self, size: int) -> list[Product]:
        parts = [c.unstack(size) for c in self.components]
        return [Product([p[i] for p in parts]) for i in range(size)]

    def __repr__(self) -> str:
        return f"Product({self.components!r})"
