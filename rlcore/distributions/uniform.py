"""Uniform distributions over boxes: continuous and integer-valued."""

from __future__ import annotations

import numpy as np

from rlcore.core.errors import PreconditionError, ShapeMismatchError
from rlcore.core.seeding import Seed, as_rng
from rlcore.distributions.base import Distribution, safe_log


class Uniform(Distribution[np.ndarray]):
    """Continuous uniform distribution on ``[low, high]``, element-wise.

    ``shape`` defaults to the broadcast shape of the bounds.  Densities are
    element-wise; wrap in ``Independent`` to treat an array as one event.
    Sampling needs finite bounds.
    """

    def __init__(
        self,
        low: np.ndarray | float = 0.0,
        high: np.ndarray | float = 1.0,
        shape: tuple[int, ...] | None = None,
    ) -> None:
        self.low = np.asarray(low, dtype=np.float64)
        self.high = np.asarray(high, dtype=np.float64)
        bounds_shape = np.broadcast_shapes(self.low.shape, self.high.shape)
        self.shape = tuple(shape) if shape is not None else bounds_shape
        if np.any(self.high < self.low):
            raise PreconditionError("'high' must be greater than or equal to 'low'.")

    def log_probability(self, value: np.ndarray) -> np.ndarray:
        v = np.asarray(value, dtype=np.float64)
        inside = (v >= self.low) & (v <= self.high)
        return np.where(inside, -safe_log(self.high - self.low), -np.inf)

    def entropy(self) -> np.ndarray:
        return np.broadcast_to(safe_log(self.high - self.low), self.shape).copy()

    def mode(self, rng: Seed = None) -> np.ndarray:
        # Every point of the support is a mode.
        return self.sample(rng)

    def sample(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        return rng.uniform(self.low, self.high, size=self.shape)

    def unstack(self, size: int) -> list[Uniform]:
        return [
            Uniform(low, high, shape=self.shape[1:])
            for low, high in _split_bounds(self.low, self.high, self.shape, size)
        ]

    def __repr__(self) -> str:
        return f"Uniform(low={self.low!r}, high={self.high!r})"


class DiscreteUniform(Distribution[np.ndarray]):
    """Uniform distribution over the integers ``low..high`` (inclusive), element-wise."""

    def __init__(
        self,
        low: np.ndarray | int,
        high: np.ndarray | int,
        shape: tuple[int, ...] | None = None,
    ) -> None:
        self.low = np.asarray(low, dtype=np.int64)
        self.high = np.asarray(high, dtype=np.int64)
        bounds_shape = np.broadcast_shapes(self.low.shape, self.high.shape)
        self.shape = tuple(shape) if shape is not None else bounds_shape
        if np.any(self.high < self.low):
            raise PreconditionError("'high' must be greater than or equal to 'low'.")

    @property
    def num_values(self) -> np.ndarray:
        return self.high - self.low + 1

    def log_probability(self, value: np.ndarray) -> np.ndarray:
        v = np.asarray(value)
        inside = (v >= self.low) & (v <= self.high) & (v == np.round(v))
        return np.where(inside, -np.log(self.num_values.astype(np.float64)), -np.inf)

    def entropy(self) -> np.ndarray:
        return np.broadcast_to(np.log(self.num_values.astype(np.float64)), self.shape).copy()

    def mode(self, rng: Seed = None) -> np.ndarray:
        return self.sample(rng)

    def sample(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        return rng.integers(self.low, self.high, size=self.shape, endpoint=True)

    def unstack(self, size: int) -> list[DiscreteUniform]:
        return [
            DiscreteUniform(low, high, shape=self.shape[1:])
            for low, high in _split_bounds(self.low, self.high, self.shape, size)
        ]

    def __repr__(self) -> str:
        return f"DiscreteUniform(low={self.low!r}, high={self.high!r})"


def _split_bounds(
    low: np.ndarray, high: np.ndarray, shape: tuple[int, ...], size: int
) -> list[tuple[np.ndarray, np.ndarray]]:
    if not shape:
        raise ShapeMismatchError("Cannot unstack a distribution without a batch axis.")
    if shape[0] != size:
        raise ShapeMismatchError(
            f"Expected a batch of size {size}, got leading dimension {shape[0]}."
        )

    def rows(bound: np.ndarray) -> list[np.ndarray]:
        # Bounds without the batch axis are shared by every row.
        if bound.ndim < len(shape):
            return [bound] * size
        return list(np.broadcast_to(bound, shape))

    return list(zip(rows(low), rows(high)))
