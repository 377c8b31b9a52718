"""Greedy policy: always plays the mode of a wrapped probabilistic policy."""

from __future__ import annotations

import numpy as np

from rlcore.core.errors import PreconditionError
from rlcore.core.types import Action, Observation, PolicyStep, Reward, State, Step
from rlcore.distributions.deterministic import Deterministic
from rlcore.policies.base import ProbabilisticPolicy


class GreedyPolicy(ProbabilisticPolicy[Action, Observation, Reward, State]):
    """Wraps a probabilistic policy and reports its mode as a Deterministic distribution.

    Ties in the mode are broken with this policy's own RNG, seeded like the
    wrapped policy unless ``seed`` is given.  Batching and state follow the
    wrapped policy.  The returned point mass keeps the event rank of the
    wrapped distribution, so both report log-probabilities of one shape.
    """

    def __init__(self, wrapped: ProbabilisticPolicy[Action, Observation, Reward, State], seed: int | None = None) -> None:
        if not isinstance(wrapped, ProbabilisticPolicy):
            raise PreconditionError(
                f"GreedyPolicy needs a probabilistic policy, got {type(wrapped).__name__}."
            )
        self.wrapped = wrapped
        super().__init__(wrapped.seed if seed is None else seed)

    @property
    def batched(self) -> bool:  # type: ignore[override]
        return self.wrapped.batched

    def initial_state(self) -> State:
        return self.wrapped.initial_state()

    def policy_step(self, step: Step[Observation, Reward], state: State) -> PolicyStep:
        inner = self.wrapped.policy_step(step, state)
        mode = self.draw(inner.distribution, step, lambda d, rng: d.mode(rng))
        event_ndims = np.ndim(mode) - np.ndim(inner.distribution.log_probability(mode))
        return PolicyStep(Deterministic(mode, max(event_ndims, 0)), inner.state)

    def __repr__(self) -> str:
        return f"GreedyPolicy({self.wrapped!r})"
