"""Typed value domains for actions and observations.

Each space knows its ``shape``, checks membership exactly with
``contains`` and exposes a default ``distribution``, the uninformed
sampler over its domain (not a learned policy).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Sequence

import numpy as np

from rlcore.core.errors import PreconditionError
from rlcore.core.seeding import Seed
from rlcore.distributions import (
    Bernoulli,
    Categorical,
    DiscreteUniform,
    Distribution,
    Independent,
    Product,
    Uniform,
)


class Space(ABC):
    """Abstract value domain."""

    shape: tuple[int, ...] = ()

    @property
    @abstractmethod
    def distribution(self) -> Distribution:
        """Default sampling distribution over this space."""

    @abstractmethod
    def contains(self, value: Any) -> bool:
        """True if ``value`` is a member of this space."""

    def sample(self, rng: Seed = None) -> Any:
        return self.distribution.sample(rng)

    def __contains__(self, value: Any) -> bool:
        return self.contains(value)


def _is_integral(array: np.ndarray) -> bool:
    if np.issubdtype(array.dtype, np.integer):
        return True
    if np.issubdtype(array.dtype, np.floating):
        return bool(np.all(np.isfinite(array)) and np.all(array == np.round(array)))
    return False


# ---------------------------------------------------------------------------
# Discrete spaces
# ---------------------------------------------------------------------------

class Discrete(Space):
    """Integers ``0..size-1``; a scalar space."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise PreconditionError(f"'size' must be positive, got {size}.")
        self.size = int(size)
        self.shape = ()
        self._distribution = Categorical(logits=np.zeros(self.size))

    @property
    def distribution(self) -> Categorical:
        return self._distribution

    def contains(self, value: Any) -> bool:
        array = np.asarray(value)
        if array.shape != () or not np.issubdtype(array.dtype, np.integer):
            return False
        return 0 <= int(array) < self.size

    def __repr__(self) -> str:
        return f"Discrete({self.size})"


class MultiDiscrete(Space):
    """Vectors whose component ``i`` lies in ``0..sizes[i]-1``."""

    def __init__(self, sizes: Sequence[int]) -> None:
        if len(sizes) == 0 or any(s <= 0 for s in sizes):
            raise PreconditionError(f"'sizes' must be non-empty and positive, got {sizes}.")
        self.sizes = np.asarray(sizes, dtype=np.int64)
        self.shape = (len(self.sizes),)
        self._distribution = Product(
            [Categorical(logits=np.zeros(int(s))) for s in self.sizes]
        )

    @property
    def distribution(self) -> Product:
        return self._distribution

    def contains(self, value: Any) -> bool:
        array = np.asarray(value)
        if array.shape != self.shape or not np.issubdtype(array.dtype, np.integer):
            return False
        return bool(np.all(array >= 0) and np.all(array < self.sizes))

    def __repr__(self) -> str:
        return f"MultiDiscrete({', '.join(str(s) for s in self.sizes)})"


class MultiBinary(Space):
    """Vectors of ``size`` independent bits."""

    def __init__(self, size: int) -> None:
        if size <= 0:
            raise PreconditionError(f"'size' must be positive, got {size}.")
        self.size = int(size)
        self.shape = (self.size,)
        self._distribution = Independent(Bernoulli(logits=np.zeros(self.size)), event_ndims=1)

    @property
    def distribution(self) -> Independent:
        return self._distribution

    def contains(self, value: Any) -> bool:
        array = np.asarray(value)
        if array.shape != self.shape:
            return False
        return bool(np.all((array == 0) | (array == 1)))

    def __repr__(self) -> str:
        return f"MultiBinary({self.size})"


# ---------------------------------------------------------------------------
# Boxes
# ---------------------------------------------------------------------------

def _bounds(low: Any, high: Any, shape: Sequence[int] | None, dtype: Any) -> tuple[np.ndarray, np.ndarray]:
    low = np.asarray(low, dtype=dtype)
    high = np.asarray(high, dtype=dtype)
    if shape is not None:
        shape = tuple(shape)
        try:
            low = np.broadcast_to(low, shape).copy()
            high = np.broadcast_to(high, shape).copy()
        except ValueError as exc:
            raise PreconditionError(f"Bounds cannot be broadcast to shape {shape}.") from exc
    if low.shape != high.shape:
        raise PreconditionError(
            f"'low' and 'high' must have the same shape, got {low.shape} and {high.shape}."
        )
    if np.any(high < low):
        raise PreconditionError("'high' must be greater than or equal to 'low'.")
    return low, high


class Box(Space):
    """Real-valued arrays bounded element-wise by ``low`` and ``high``."""

    def __init__(
        self,
        low: Any,
        high: Any,
        shape: Sequence[int] | None = None,
        dtype: Any = np.float64,
    ) -> None:
        self.low, self.high = _bounds(low, high, shape, dtype)
        self.shape = self.low.shape
        self._distribution = Independent(
            Uniform(self.low, self.high), event_ndims=len(self.shape)
        )

    @property
    def distribution(self) -> Independent:
        return self._distribution

    def contains(self, value: Any) -> bool:
        array = np.asarray(value)
        if array.shape != self.shape or not np.issubdtype(array.dtype, np.number):
            return False
        return bool(np.all(array >= self.low) and np.all(array <= self.high))

    def __repr__(self) -> str:
        return f"Box({', '.join(str(d) for d in self.shape)})"


class DiscreteBox(Space):
    """Integer-valued arrays bounded element-wise by ``low`` and ``high``."""

    def __init__(self, low: Any, high: Any, shape: Sequence[int] | None = None) -> None:
        self.low, self.high = _bounds(low, high, shape, np.int64)
        self.shape = self.low.shape
        self._distribution = Independent(
            DiscreteUniform(self.low, self.high), event_ndims=len(self.shape)
        )

    @property
    def distribution(self) -> Independent:
        return self._distribution

    def contains(self, value: Any) -> bool:
        array = np.asarray(value)
        if array.shape != self.shape or not _is_integral(array):
            return False
        return bool(np.all(array >= self.low) and np.all(array <= self.high))

    def __repr__(self) -> str:
        return f"DiscreteBox({', '.join(str(d) for d in self.shape)})"
