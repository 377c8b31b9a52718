"""Distribution contract.

Parameters are numpy arrays whose leading axes are batch axes; every
operation broadcasts over them, and ``unstack`` splits them into
per-instance distributions.  ``sample`` and ``mode`` take an explicit
``rng`` (Generator, integer seed or None); there is no hidden RNG.

Numerical policy: zero probabilities yield ``-inf`` log-probabilities
(without runtime warnings), NaN parameters propagate as NaN, nothing is
clamped.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

import numpy as np

from rlcore.core.seeding import Seed

Value = TypeVar("Value")


class Distribution(ABC, Generic[Value]):
    """Abstract probability distribution over values of type ``Value``."""

    @abstractmethod
    def log_probability(self, value: Value) -> np.ndarray:
        """Log-probability (or log-density) of ``value``."""

    @abstractmethod
    def entropy(self) -> np.ndarray:
        """Entropy of the distribution (per batch element)."""

    @abstractmethod
    def mode(self, rng: Seed = None) -> Value:
        """Return a most likely value.

        If there are several, one of them is chosen uniformly at random
        using ``rng``.
        """

    @abstractmethod
    def sample(self, rng: Seed = None) -> Value:
        """Draw a random value using ``rng``."""

    def probability(self, value: Value) -> np.ndarray:
        return np.exp(self.log_probability(value))

    def unstack(self, size: int) -> list[Distribution[Value]]:
        """Split along the leading batch axis into ``size`` per-instance distributions.

        Sampling row ``i`` of the result with a generator draws exactly what
        an unbatched distribution with the same parameters would draw.
        """
        raise NotImplementedError(
            f"{type(self).__name__} cannot be split into per-instance distributions."
        )


def log_sigmoid(x: np.ndarray) -> np.ndarray:
    """Numerically stable ``log(sigmoid(x)) = -softplus(-x)``."""
    return -np.logaddexp(0.0, -x)


def log_sum_exp(x: np.ndarray, axis: int = -1) -> np.ndarray:
    """Numerically stable ``log(sum(exp(x)))`` keeping the reduced axis."""
    x = np.asarray(x, dtype=np.float64)
    peak = np.max(x, axis=axis, keepdims=True)
    peak = np.where(np.isfinite(peak), peak, 0.0)
    with np.errstate(divide="ignore"):
        return peak + np.log(np.sum(np.exp(x - peak), axis=axis, keepdims=True))


def safe_log(x: np.ndarray) -> np.ndarray:
    """``log`` that maps zero to ``-inf`` without emitting a warning."""
    with np.errstate(divide="ignore"):
        return np.log(np.asarray(x, dtype=np.float64))
