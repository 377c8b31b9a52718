"""Framework-level types shared by environments, policies and drivers.

A ``Step`` is what an environment emits, a ``TrajectoryStep`` is what the
driver hands to its listeners.  Both are immutable and both implement the
stacking contract, so a list of per-instance records and one batched
record can be converted into each other transparently.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Generic, NamedTuple, Sequence, TypeVar

import numpy as np

from rlcore.core.errors import ShapeMismatchError
from rlcore.core.stacking import stack, unstack

Observation = TypeVar("Observation")
Action = TypeVar("Action")
Reward = TypeVar("Reward")
State = TypeVar("State")


# ---------------------------------------------------------------------------
# Step kind
# ---------------------------------------------------------------------------

class StepKind(IntEnum):
    """Position of a step within an episode.

    Batched kinds are integer arrays holding these codes.
    """

    FIRST = 0
    TRANSITION = 1
    LAST = 2


def _matches(kind: StepKind | np.ndarray, target: StepKind) -> bool | np.ndarray:
    if isinstance(kind, np.ndarray):
        return kind == target
    return bool(kind == target)


# ---------------------------------------------------------------------------
# Environment step
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Step(Generic[Observation, Reward]):
    """One observation / reward / kind snapshot emitted by an environment."""

    kind: StepKind | np.ndarray
    observation: Observation
    reward: Reward = 0.0

    def is_first(self) -> bool | np.ndarray:
        return _matches(self.kind, StepKind.FIRST)

    def is_transition(self) -> bool | np.ndarray:
        return _matches(self.kind, StepKind.TRANSITION)

    def is_last(self) -> bool | np.ndarray:
        return _matches(self.kind, StepKind.LAST)

    @property
    def batched(self) -> bool:
        return isinstance(self.kind, np.ndarray) and self.kind.ndim > 0

    def replace(self, **changes: Any) -> Step[Observation, Reward]:
        """Return a copy with the given fields overridden."""
        return dataclasses.replace(self, **changes)

    @classmethod
    def stack(cls, values: Sequence[Step]) -> Step:
        return cls(
            kind=np.asarray([int(v.kind) for v in values], dtype=np.int64),
            observation=stack([v.observation for v in values]),
            reward=stack([v.reward for v in values]),
        )

    def unstack(self, size: int | None = None) -> list[Step]:
        if not self.batched:
            raise ShapeMismatchError("Cannot unstack a step that is not batched.")
        kinds = [StepKind(int(k)) for k in self.kind]
        if size is not None and len(kinds) != size:
            raise ShapeMismatchError(
                f"Expected a batch of size {size}, got {len(kinds)} step kinds."
            )
        observations = unstack(self.observation, len(kinds))
        rewards = unstack(self.reward, len(kinds))
        return [
            Step(kind=k, observation=o, reward=r)
            for k, o, r in zip(kinds, observations, rewards)
        ]


# ---------------------------------------------------------------------------
# Trajectory step (what listeners receive)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class TrajectoryStep(Generic[Action, Observation, Reward, State]):
    """A transition together with the action and policy state behind it."""

    current_step: Step[Observation, Reward]
    next_step: Step[Observation, Reward]
    action: Action
    policy_state: State = None

    def is_first(self) -> bool | np.ndarray:
        return self.current_step.is_first()

    def is_transition(self) -> bool | np.ndarray:
        return self.current_step.is_transition() & self.next_step.is_transition()

    def is_last(self) -> bool | np.ndarray:
        return self.next_step.is_last()

    def is_boundary(self) -> bool | np.ndarray:
        """True where the current step is terminal (the LAST -> FIRST hop)."""
        return self.current_step.is_last()

    @classmethod
    def stack(cls, values: Sequence[TrajectoryStep]) -> TrajectoryStep:
        return cls(
            current_step=Step.stack([v.current_step for v in values]),
            next_step=Step.stack([v.next_step for v in values]),
            action=stack([v.action for v in values]),
            policy_state=stack([v.policy_state for v in values]),
        )

    def unstack(self, size: int | None = None) -> list[TrajectoryStep]:
        currents = self.current_step.unstack(size)
        n = len(currents)
        nexts = self.next_step.unstack(n)
        actions = unstack(self.action, n)
        states = unstack(self.policy_state, n)
        return [
            TrajectoryStep(current_step=c, next_step=nx, action=a, policy_state=s)
            for c, nx, a, s in zip(currents, nexts, actions, states)
        ]


# ---------------------------------------------------------------------------
# Policy output
# ---------------------------------------------------------------------------

class PolicyStep(NamedTuple):
    """Action distribution plus the policy state produced alongside it."""

    distribution: Any
    state: Any = None
