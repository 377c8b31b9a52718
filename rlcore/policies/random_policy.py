"""Random policy: samples uniformly from the action space (deterministic given seed)."""

from __future__ import annotations

from typing import Any

from rlcore.core.base_env import Environment
from rlcore.core.types import PolicyStep, Step
from rlcore.policies.base import ProbabilisticPolicy
from rlcore.spaces import Space


class RandomPolicy(ProbabilisticPolicy[Any, Any, Any, None]):
    """Ignores the observation and samples the action space's default distribution."""

    batched = False

    def __init__(self, action_space: Space, seed: int | None = None) -> None:
        self.action_space = action_space
        super().__init__(seed)

    @classmethod
    def for_environment(cls, environment: Environment, seed: int | None = None) -> RandomPolicy:
        return cls(environment.action_space, seed=seed)

    def policy_step(self, step: Step, state: None) -> PolicyStep:
        return PolicyStep(self.action_space.distribution, state)

    def __repr__(self) -> str:
        return f"RandomPolicy({self.action_space!r})"
