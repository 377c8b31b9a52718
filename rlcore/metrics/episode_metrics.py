"""Episode metric listeners.

Each metric is a driver listener: it is called with one batched
``TrajectoryStep`` per iteration and accumulates per-instance counters.
Boundary transitions (current step LAST, i.e. the LAST -> FIRST hop)
carry no reward and are not part of any episode, so they are skipped.

  - AverageEpisodeLength   mean length of the most recent episodes
  - AverageEpisodeReward   mean return of the most recent episodes
  - TotalCumulativeReward  running reward sum per instance
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import Any

import numpy as np

from rlcore.core.errors import PreconditionError, ShapeMismatchError
from rlcore.core.types import TrajectoryStep


def _per_instance(value: Any, batch_size: int, dtype: Any) -> np.ndarray:
    array = np.asarray(value, dtype=dtype)
    if array.shape != (batch_size,):
        raise ShapeMismatchError(
            f"Expected per-instance values of shape ({batch_size},), got {array.shape}."
        )
    return array


class EpisodeMetric(ABC):
    """Base listener tracking per-instance episode accumulators."""

    def __init__(self, batch_size: int) -> None:
        if batch_size < 1:
            raise PreconditionError(f"'batch_size' must be >= 1, got {batch_size}.")
        self.batch_size = batch_size

    def __call__(self, trajectory: TrajectoryStep) -> None:
        active = ~_per_instance(trajectory.is_boundary(), self.batch_size, bool)
        finished = active & _per_instance(trajectory.is_last(), self.batch_size, bool)
        reward = _per_instance(trajectory.next_step.reward, self.batch_size, np.float64)
        self._update(active, finished, reward)

    @abstractmethod
    def _update(self, active: np.ndarray, finished: np.ndarray, reward: np.ndarray) -> None:
        ...

    @abstractmethod
    def reset(self) -> None:
        """Forget everything accumulated so far."""

    @abstractmethod
    def value(self) -> Any:
        ...


# ---------------------------------------------------------------------------
# Buffered episode averages
# ---------------------------------------------------------------------------

class _BufferedEpisodeMetric(EpisodeMetric):
    """Averages a per-episode quantity over the last ``buffer_size`` episodes."""

    def __init__(self, batch_size: int, buffer_size: int) -> None:
        super().__init__(batch_size)
        if buffer_size < 1:
            raise PreconditionError(f"'buffer_size' must be >= 1, got {buffer_size}.")
        self.buffer_size = buffer_size
        self._buffer: deque[float] = deque(maxlen=buffer_size)
        self._running = np.zeros(batch_size, dtype=np.float64)

    def _update(self, active: np.ndarray, finished: np.ndarray, reward: np.ndarray) -> None:
        self._running += np.where(active, self._increment(reward), 0.0)
        # Instances finish in index order within one iteration.
        for i in np.flatnonzero(finished):
            self._buffer.append(float(self._running[i]))
        self._running[finished] = 0.0

    @abstractmethod
    def _increment(self, reward: np.ndarray) -> np.ndarray:
        ...

    def reset(self) -> None:
        self._buffer.clear()
        self._running = np.zeros(self.batch_size, dtype=np.float64)

    def value(self) -> float:
        if not self._buffer:
            return 0.0
        return float(np.mean(self._buffer))


class AverageEpisodeLength(_BufferedEpisodeMetric):
    """Mean number of steps of the last ``buffer_size`` completed episodes."""

    def _increment(self, reward: np.ndarray) -> np.ndarray:
        return np.ones_like(reward)


class AverageEpisodeReward(_BufferedEpisodeMetric):
    """Mean return of the last ``buffer_size`` completed episodes."""

    def _increment(self, reward: np.ndarray) -> np.ndarray:
        return reward


# ---------------------------------------------------------------------------
# Running totals
# ---------------------------------------------------------------------------

class TotalCumulativeReward(EpisodeMetric):
    """Reward summed per instance since construction or the last reset."""

    def __init__(self, batch_size: int) -> None:
        super().__init__(batch_size)
        self._totals = np.zeros(batch_size, dtype=np.float64)

    def _update(self, active: np.ndarray, finished: np.ndarray, reward: np.ndarray) -> None:
        self._totals += np.where(active, reward, 0.0)

    def reset(self) -> None:
        self._totals = np.zeros(self.batch_size, dtype=np.float64)

    def value(self) -> np.ndarray:
        return self._totals.copy()
