"""Observation normalization for actor policies.

``RunningMeanStd`` keeps streaming moments with the parallel update of
OpenAI baselines.  ``ObservationNormalizer`` wraps it as the callable an
``ActorPolicy`` applies to every observation before the network sees it.
"""

from __future__ import annotations

import numpy as np

from rlcore.core.errors import PreconditionError, ShapeMismatchError


class RunningMeanStd:
    """Running mean and variance over values of a fixed ``shape``.

    Starts from mean 0 and variance 1 weighted by ``epsilon`` pseudo-counts.
    """

    def __init__(self, shape: tuple[int, ...] = (), epsilon: float = 1e-4) -> None:
        if epsilon <= 0:
            raise PreconditionError(f"'epsilon' must be positive, got {epsilon}.")
        self.shape = tuple(shape)
        self.epsilon = epsilon
        self.reset()

    def reset(self) -> None:
        self.mean = np.zeros(self.shape, dtype=np.float64)
        self.var = np.ones(self.shape, dtype=np.float64)
        self.count = self.epsilon

    def update(self, x: np.ndarray) -> None:
        """Fold a batch ``x`` of shape ``(n, *shape)`` into the moments."""
        x = np.asarray(x, dtype=np.float64)
        if x.shape[1:] != self.shape:
            raise ShapeMismatchError(
                f"Expected a batch of shape (n, *{self.shape}), got {x.shape}."
            )
        if x.shape[0] == 0:
            return
        self._update_from_moments(x.mean(axis=0), x.var(axis=0), x.shape[0])

    def _update_from_moments(self, batch_mean: np.ndarray, batch_var: np.ndarray, batch_count: int) -> None:
        delta = batch_mean - self.mean
        total = self.count + batch_count
        m_a = self.var * self.count
        m_b = batch_var * batch_count
        m2 = m_a + m_b + np.square(delta) * self.count * batch_count / total

        self.mean = self.mean + delta * batch_count / total
        self.var = m2 / total
        self.count = total


class ObservationNormalizer:
    """Standardises observations with running statistics.

    Parameters
    ----------
    shape : tuple[int, ...]
        Shape of one observation.  Single observations and batches of
        shape ``(B, *shape)`` are both accepted; every instance of a batch
        updates the statistics.
    clip : float | None
        Normalized values are clipped to ``[-clip, clip]`` when set.
    update : bool
        Whether calls update the statistics.  Turn off to freeze them.
    epsilon : float
        Added to the variance before taking the square root.
    """

    def __init__(
        self,
        shape: tuple[int, ...],
        clip: float | None = None,
        update: bool = True,
        epsilon: float = 1e-8,
    ) -> None:
        if clip is not None and clip <= 0:
            raise PreconditionError(f"'clip' must be positive, got {clip}.")
        self.stats = RunningMeanStd(shape)
        self.clip = clip
        self.update = update
        self.epsilon = epsilon

    def reset(self) -> None:
        self.stats.reset()

    def __call__(self, observation: np.ndarray) -> np.ndarray:
        obs = np.asarray(observation, dtype=np.float64)
        shape = self.stats.shape
        leading = obs.ndim - len(shape)
        if leading < 0 or obs.shape[leading:] != shape:
            raise ShapeMismatchError(
                f"Expected observations ending in shape {shape}, got {obs.shape}."
            )
        if self.update:
            self.stats.update(obs.reshape((-1,) + shape))

        normalized = (obs - self.stats.mean) / np.sqrt(self.stats.var + self.epsilon)
        if self.clip is not None:
            normalized = np.clip(normalized, -self.clip, self.clip)
        return normalized

    def __repr__(self) -> str:
        return f"ObservationNormalizer(shape={self.stats.shape}, clip={self.clip}, update={self.update})"
