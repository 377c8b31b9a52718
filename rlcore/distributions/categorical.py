"""Categorical distribution over ``{0, ..., n - 1}`` (last parameter axis)."""

from __future__ import annotations

import numpy as np

from rlcore.core.errors import PreconditionError, ShapeMismatchError
from rlcore.core.seeding import Seed, as_rng
from rlcore.core.stacking import unstack
from rlcore.distributions.base import Distribution, log_sum_exp, safe_log


class Categorical(Distribution[np.ndarray]):
    """Categorical distribution stored as normalised log-probabilities.

    Exactly one of ``logits``, ``probabilities`` or ``log_probabilities``
    must be given.  Probabilities that do not sum to one are renormalised
    through the log-sum-exp; zero probabilities become ``-inf``.
    """

    def __init__(
        self,
        logits: np.ndarray | None = None,
        probabilities: np.ndarray | None = None,
        log_probabilities: np.ndarray | None = None,
    ) -> None:
        given = [x is not None for x in (logits, probabilities, log_probabilities)]
        if sum(given) != 1:
            raise PreconditionError(
                "Exactly one of 'logits', 'probabilities' or 'log_probabilities' is required."
            )
        if probabilities is not None:
            logits = safe_log(probabilities)
        elif log_probabilities is not None:
            logits = log_probabilities
        logits = np.asarray(logits, dtype=np.float64)
        if logits.ndim == 0:
            raise PreconditionError("Categorical parameters need at least one axis.")
        self.log_probabilities = logits - log_sum_exp(logits, axis=-1)

    @property
    def num_categories(self) -> int:
        return int(self.log_probabilities.shape[-1])

    @property
    def probabilities(self) -> np.ndarray:
        return np.exp(self.log_probabilities)

    def log_probability(self, value: np.ndarray) -> np.ndarray:
        index = np.asarray(value, dtype=np.int64)
        batch_shape = np.broadcast_shapes(index.shape, self.log_probabilities.shape[:-1])
        index = np.broadcast_to(index, batch_shape)
        log_probs = np.broadcast_to(self.log_probabilities, batch_shape + (self.num_categories,))
        inside = (index >= 0) & (index < self.num_categories)
        safe_index = np.where(inside, index, 0)
        gathered = np.take_along_axis(log_probs, safe_index[..., None], axis=-1)[..., 0]
        return np.where(inside, gathered, -np.inf)

    def entropy(self) -> np.ndarray:
        p = self.probabilities
        with np.errstate(invalid="ignore"):
            terms = np.where(p > 0.0, p * self.log_probabilities, 0.0)
        return -np.sum(terms, axis=-1)

    def mode(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        peak = np.max(self.log_probabilities, axis=-1, keepdims=True)
        is_mode = self.log_probabilities == peak
        # Random scores among the maximal entries break ties uniformly.
        scores = np.where(is_mode, rng.random(is_mode.shape), -1.0)
        return np.argmax(scores, axis=-1)

    def sample(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        gumbel = rng.gumbel(size=self.log_probabilities.shape)
        return np.argmax(self.log_probabilities + gumbel, axis=-1)

    def unstack(self, size: int) -> list[Categorical]:
        if self.log_probabilities.ndim < 2:
            raise ShapeMismatchError("Cannot unstack a Categorical without a batch axis.")
        return [_normalised(row) for row in unstack(self.log_probabilities, size)]

    def __repr__(self) -> str:
        return f"Categorical(probabilities={self.probabilities!r})"


def _normalised(log_probabilities: np.ndarray) -> Categorical:
    """Build a Categorical from log-probabilities that already sum to one."""
    distribution = Categorical.__new__(Categorical)
    distribution.log_probabilities = log_probabilities
    return distribution
