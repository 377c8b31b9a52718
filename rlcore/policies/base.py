"""Policy interfaces.

A policy maps an environment ``Step`` to an action.  Policies that expose
the distribution they sample from derive from ``ProbabilisticPolicy``,
which threads the policy state explicitly:

  1. ``policy_step(step, state)`` is pure and returns a fresh ``PolicyStep``
  2. ``action_distribution(step)`` feeds ``self.state`` in and stores the
     returned state
  3. ``action(step)`` samples the distribution with the policy's own RNG

Batched policies sample row ``i`` of a batched step with a generator
seeded by ``derive_seed(seed, i)``, the seed an unbatched copy ``i``
receives from the driver, so both representations draw the same actions.
"""

from __future__ import annotations

import copy as copy_module
from abc import ABC, abstractmethod
from typing import Any, Callable, Generic

import numpy as np

from rlcore.core.seeding import derive_seed, make_rng
from rlcore.core.stacking import stack
from rlcore.core.types import Action, Observation, PolicyStep, Reward, State, Step
from rlcore.distributions.base import Distribution


class Policy(ABC, Generic[Action, Observation, Reward, State]):
    """Interface that all policies must implement."""

    #: Batched policies map a stacked step to a stacked action in one call.
    batched: bool = False

    def __init__(self, seed: int | None = None) -> None:
        self._seed = seed
        self._rng: np.random.Generator = make_rng(seed)
        self._row_root: int | None = None
        self._row_rngs: list[np.random.Generator] = []
        self._state: State = self.initial_state()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> State:
        return self._state

    @state.setter
    def state(self, value: State) -> None:
        self._state = value

    def initial_state(self) -> State:
        """State at the start of an episode.  Stateless policies use None."""
        return None

    @property
    def seed(self) -> int | None:
        return self._seed

    @property
    def rng(self) -> np.random.Generator:
        return self._rng

    def row_generators(self, batch_size: int) -> list[np.random.Generator]:
        """Per-row generators for batched sampling, created on first use.

        Row ``i`` is seeded with ``derive_seed(seed, i)``.  Unseeded
        policies draw the root from their own RNG.
        """
        if self._row_root is None:
            self._row_root = self._seed if self._seed is not None else int(self._rng.integers(2**32))
        for i in range(len(self._row_rngs), batch_size):
            self._row_rngs.append(make_rng(derive_seed(self._row_root, i)))
        return self._row_rngs[:batch_size]

    # ------------------------------------------------------------------
    # Behaviour
    # ------------------------------------------------------------------

    @abstractmethod
    def action(self, step: Step[Observation, Reward]) -> Action:
        """Choose an action given the current step."""

    def copy(self) -> Policy[Action, Observation, Reward, State]:
        """Independent deep copy; state and RNG do not alias the original."""
        return copy_module.deepcopy(self)

    def reseed(self, seed: int | None) -> None:
        self._seed = seed
        self._rng = make_rng(seed)
        self._row_root = None
        self._row_rngs = []


class ProbabilisticPolicy(Policy[Action, Observation, Reward, State]):
    """A policy that samples its action from an explicit distribution."""

    @abstractmethod
    def policy_step(self, step: Step[Observation, Reward], state: State) -> PolicyStep:
        """Return the action distribution and the next state.

        Must not mutate ``state``.
        """

    def action_distribution(self, step: Step[Observation, Reward]) -> Distribution:
        result = self.policy_step(step, self._state)
        self._state = result.state
        return result.distribution

    def action(self, step: Step[Observation, Reward]) -> Action:
        return self.draw(self.action_distribution(step), step, lambda d, rng: d.sample(rng))

    def draw(
        self,
        distribution: Distribution,
        step: Step[Observation, Reward],
        drawer: Callable[[Distribution, np.random.Generator], Any],
    ) -> Any:
        """Apply ``drawer`` with the policy's RNG, row by row for batched steps."""
        if not (self.batched and step.batched):
            return drawer(distribution, self._rng)
        batch_size = len(step.kind)
        rows = distribution.unstack(batch_size)
        generators = self.row_generators(batch_size)
        return stack([drawer(row, rng) for row, rng in zip(rows, generators)])
