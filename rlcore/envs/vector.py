"""Batched view over independent copies of an unbatched environment."""

from __future__ import annotations

from rlcore.core.base_env import Environment
from rlcore.core.errors import PreconditionError
from rlcore.core.seeding import derive_seed
from rlcore.core.stacking import unstack
from rlcore.core.types import Action, Observation, Reward, Step


class VectorEnvironment(Environment[Action, Observation, Reward]):
    """Steps ``batch_size`` copies of ``environment`` as one batched environment.

    Actions are unstacked and dispatched per instance; the resulting steps
    are stacked back into one batched ``Step``.  Spaces are the per-instance
    spaces of the prototype.
    """

    batched = True

    def __init__(self, environment: Environment[Action, Observation, Reward], batch_size: int) -> None:
        if environment.batched:
            raise PreconditionError("Cannot vectorise an already batched environment.")
        if batch_size <= 0:
            raise PreconditionError(f"'batch_size' must be positive, got {batch_size}.")
        self._prototype = environment
        self._environments = [environment.copy() for _ in range(batch_size)]

    @property
    def action_space(self):
        return self._prototype.action_space

    @property
    def observation_space(self):
        return self._prototype.observation_space

    @property
    def batch_size(self) -> int:
        return len(self._environments)

    @property
    def environments(self) -> list[Environment[Action, Observation, Reward]]:
        return list(self._environments)

    def step(self, action: Action) -> Step:
        actions = unstack(action, self.batch_size)
        return Step.stack([env.step(a) for env, a in zip(self._environments, actions)])

    def reset(self) -> Step:
        return Step.stack([env.reset() for env in self._environments])

    def copy(self) -> VectorEnvironment[Action, Observation, Reward]:
        return VectorEnvironment(self._prototype, self.batch_size)

    def reseed(self, seed: int | None) -> None:
        for i, env in enumerate(self._environments):
            env.reseed(None if seed is None else derive_seed(seed, i))

    def __repr__(self) -> str:
        return f"VectorEnvironment({self._prototype!r}, batch_size={self.batch_size})"
