"""Degenerate distribution that always yields one value."""

from __future__ import annotations

from typing import Any

import numpy as np

from rlcore.core.errors import PreconditionError
from rlcore.core.seeding import Seed
from rlcore.core.stacking import unstack
from rlcore.distributions.base import Distribution


class Deterministic(Distribution[Any]):
    """Point mass at ``value``.

    The trailing ``event_ndims`` axes of ``value`` form one event: the
    log-probability is 0 where the query matches the held value on the
    whole event and ``-inf`` elsewhere.  With the default of 0 the
    comparison is element-wise.  NaN never equals anything, so a NaN query
    (or a NaN held value) has log-probability ``-inf``.
    """

    def __init__(self, value: Any, event_ndims: int = 0) -> None:
        if event_ndims < 0 or event_ndims > np.ndim(value):
            raise PreconditionError(
                f"'event_ndims' must be between 0 and {np.ndim(value)}, got {event_ndims}."
            )
        self.value = value
        self.event_ndims = event_ndims

    def _event_axes(self) -> tuple[int, ...]:
        return tuple(range(-self.event_ndims, 0))

    def log_probability(self, value: Any) -> np.ndarray:
        equal = np.asarray(value) == np.asarray(self.value)
        if self.event_ndims:
            equal = np.all(equal, axis=self._event_axes())
        return np.where(equal, 0.0, -np.inf)

    def entropy(self) -> np.ndarray:
        shape = np.shape(self.value)
        return np.zeros(shape[: len(shape) - self.event_ndims])

    def mode(self, rng: Seed = None) -> Any:
        return self.value

    def sample(self, rng: Seed = None) -> Any:
        return self.value

    def unstack(self, size: int) -> list[Deterministic]:
        if np.ndim(self.value) <= self.event_ndims:
            raise PreconditionError("Cannot unstack a Deterministic without a batch axis.")
        return [Deterministic(v, self.event_ndims) for v in unstack(self.value, size)]

    def __repr__(self) -> str:
        if self.event_ndims:
            return f"Deterministic({self.value!r}, event_ndims={self.event_ndims})"
        return f"Deterministic({self.value!r})"
