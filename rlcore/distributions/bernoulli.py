"""Bernoulli distribution over {0, 1}, element-wise over its logits."""

from __future__ import annotations

import numpy as np

from rlcore.core.errors import PreconditionError
from rlcore.core.seeding import Seed, as_rng
from rlcore.core.stacking import unstack
from rlcore.distributions.base import Distribution, log_sigmoid, safe_log


class Bernoulli(Distribution[np.ndarray]):
    """Independent Bernoulli variables parameterised by logits.

    Exactly one of ``logits`` or ``probabilities`` must be given.  The
    probabilities are not validated; values outside [0, 1] produce NaN.
    """

    def __init__(
        self,
        logits: np.ndarray | float | None = None,
        probabilities: np.ndarray | float | None = None,
    ) -> None:
        if (logits is None) == (probabilities is None):
            raise PreconditionError("Exactly one of 'logits' or 'probabilities' is required.")
        if logits is None:
            p = np.asarray(probabilities, dtype=np.float64)
            logits = safe_log(p) - safe_log(1.0 - p)
        self.logits = np.asarray(logits, dtype=np.float64)

    @property
    def probabilities(self) -> np.ndarray:
        return np.exp(log_sigmoid(self.logits))

    def log_probability(self, value: np.ndarray) -> np.ndarray:
        v = np.asarray(value, dtype=np.float64)
        # v * log(p) + (1 - v) * log(1 - p), written so that 0 * -inf never appears.
        return np.where(v > 0.5, log_sigmoid(self.logits), log_sigmoid(-self.logits))

    def entropy(self) -> np.ndarray:
        p = self.probabilities
        with np.errstate(invalid="ignore"):
            on = np.where(p > 0.0, p * log_sigmoid(self.logits), 0.0)
            off = np.where(p < 1.0, (1.0 - p) * log_sigmoid(-self.logits), 0.0)
        return -(on + off)

    def mode(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        ties = rng.random(self.logits.shape) < 0.5
        return np.where(self.logits == 0.0, ties, self.logits > 0.0).astype(np.int64)

    def sample(self, rng: Seed = None) -> np.ndarray:
        rng = as_rng(rng)
        uniform = rng.random(self.logits.shape)
        return (uniform < self.probabilities).astype(np.int64)

    def unstack(self, size: int) -> list[Bernoulli]:
        return [Bernoulli(logits=row) for row in unstack(self.logits, size)]

    def __repr__(self) -> str:
        return f"Bernoulli(logits={self.logits!r})"
