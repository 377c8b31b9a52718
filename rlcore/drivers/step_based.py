"""Step-based driver: the rollout engine.

Pairs policy action selection with environment stepping until a step or
episode budget is exhausted, delivering one batched ``TrajectoryStep`` per
iteration to every listener.

Environments and policies each declare whether they are batched.
Unbatched sides are materialised as ``batch_size`` independent copies and
bridged with stack / unstack, so every combination goes through the same
loop:

  1. select actions   (one batched policy call, or one call per copy)
  2. advance          (one batched environment call, or one call per copy)
  3. deliver          (listeners, in registration order)
  4. count            (num_steps skips boundary steps, num_episodes counts LAST)
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Generic, NamedTuple, Sequence

import numpy as np

from rlcore.config.schema import DriverConfig
from rlcore.core.base_env import Environment
from rlcore.core.errors import PreconditionError, ShapeMismatchError
from rlcore.core.seeding import derive_seed, fresh_seed
from rlcore.core.stacking import stack, unstack
from rlcore.core.types import Action, Observation, Reward, State, Step, TrajectoryStep
from rlcore.policies.base import Policy

logger = logging.getLogger(__name__)

Listener = Callable[[TrajectoryStep], None]


class RunResult(NamedTuple):
    """Final batched step and batched policy state of a run."""

    step: Step
    state: Any


class StepBasedDriver(Generic[Action, Observation, Reward, State]):
    """Rolls out ``policy`` in ``environment`` under step / episode budgets.

    Parameters
    ----------
    environment : Environment
        Batched environments are used as-is and fix the batch size;
        unbatched ones are copied ``batch_size`` times.
    policy : Policy
        Batched policies are used as-is; unbatched ones are copied
        ``batch_size`` times.
    max_steps, max_episodes : int | None
        Budgets; None means unbounded.  The run stops as soon as either
        is reached.
    batch_size : int
        Number of environment instances.  Must agree with a batched
        environment's own batch size (1, the default, defers to it).
    seed : int | None
        Reseeds every materialised instance: copy ``i`` gets
        ``derive_seed(seed, i)``, a batched instance gets ``seed`` and
        samples its row ``i`` with ``derive_seed(seed, i)`` as well.
        Without a seed, unbatched copies still get distinct derived seeds
        (policies from the prototype's RNG, environments from OS entropy).
    """

    def __init__(
        self,
        environment: Environment[Action, Observation, Reward],
        policy: Policy[Action, Observation, Reward, State],
        max_steps: int | None = None,
        max_episodes: int | None = None,
        batch_size: int = 1,
        seed: int | None = None,
    ) -> None:
        for name, value in (("max_steps", max_steps), ("max_episodes", max_episodes)):
            if value is not None and value <= 0:
                raise PreconditionError(f"'{name}' must be > 0, got {value}.")
        if batch_size < 1:
            raise PreconditionError(f"'batch_size' must be >= 1, got {batch_size}.")
        if environment.batched:
            if batch_size not in (1, environment.batch_size):
                raise ShapeMismatchError(
                    f"'batch_size' is {batch_size} but the batched environment "
                    f"has batch size {environment.batch_size}."
                )
            batch_size = environment.batch_size

        self.max_steps = max_steps
        self.max_episodes = max_episodes
        self.batch_size = batch_size
        self.seed = seed
        self.batched_environment = environment.batched
        self.batched_policy = policy.batched

        self._environments = _materialise(environment, environment.batched, batch_size)
        self._policies = _materialise(policy, policy.batched, batch_size)
        if seed is not None:
            _reseed(self._environments, seed)
            _reseed(self._policies, seed)
        elif batch_size > 1:
            # Copies start from their prototype's RNG state and must not share it.
            if not environment.batched:
                _reseed(self._environments, fresh_seed())
            if not policy.batched:
                _reseed(self._policies, int(policy.rng.integers(2**32)))

        self._num_steps = 0
        self._num_episodes = 0

    @classmethod
    def from_config(
        cls,
        environment: Environment[Action, Observation, Reward],
        policy: Policy[Action, Observation, Reward, State],
        config: DriverConfig,
    ) -> StepBasedDriver[Action, Observation, Reward, State]:
        return cls(
            environment,
            policy,
            max_steps=config.max_steps,
            max_episodes=config.max_episodes,
            batch_size=config.batch_size,
            seed=config.seed,
        )

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def environments(self) -> list[Environment[Action, Observation, Reward]]:
        return list(self._environments)

    @property
    def policies(self) -> list[Policy[Action, Observation, Reward, State]]:
        return list(self._policies)

    @property
    def num_steps(self) -> int:
        """Non-boundary steps taken in the current (or last) run."""
        return self._num_steps

    @property
    def num_episodes(self) -> int:
        """Episodes completed in the current (or last) run."""
        return self._num_episodes

    # ------------------------------------------------------------------
    # Rollout
    # ------------------------------------------------------------------

    def run(
        self,
        step: Step[Observation, Reward] | None = None,
        state: State | None = None,
        listeners: Sequence[Listener] = (),
    ) -> RunResult:
        """Run until a budget is exhausted.

        ``step`` and ``state`` are batched values, typically the result of
        a previous run.  A missing step resets every environment; a
        missing state starts every policy from its initial state.
        Exceptions raised by listeners propagate.
        """
        self._num_steps = 0
        self._num_episodes = 0
        if self.max_steps is None and self.max_episodes is None:
            logger.warning("Driver started without max_steps or max_episodes; it only stops on error.")

        current = self._reset() if step is None else self._check_step(step)
        if state is None:
            state = stack([self._policies[0].initial_state() for _ in range(self.batch_size)])
        self._distribute_state(state)

        logger.debug(
            "Driver run started: batch_size=%d, batched_environment=%s, batched_policy=%s",
            self.batch_size, self.batched_environment, self.batched_policy,
        )
        while self._within_budget():
            action, policy_state = self._select_actions(current)
            next_step = self._advance(action)
            trajectory = TrajectoryStep(
                current_step=current,
                next_step=next_step,
                action=action,
                policy_state=policy_state,
            )
            for listener in listeners:
                listener(trajectory)
            self._num_steps += int(np.count_nonzero(~current.is_last()))
            self._num_episodes += int(np.count_nonzero(next_step.is_last()))
            current = next_step

        logger.debug(
            "Driver run finished: num_steps=%d, num_episodes=%d",
            self._num_steps, self._num_episodes,
        )
        return RunResult(current, copy.deepcopy(self._collect_state()))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _within_budget(self) -> bool:
        if self.max_steps is not None and self._num_steps >= self.max_steps:
            return False
        if self.max_episodes is not None and self._num_episodes >= self.max_episodes:
            return False
        return True

    def _reset(self) -> Step[Observation, Reward]:
        if self.batched_environment:
            return self._environments[0].reset()
        return Step.stack([env.reset() for env in self._environments])

    def _check_step(self, step: Step[Observation, Reward]) -> Step[Observation, Reward]:
        if not step.batched or len(step.kind) != self.batch_size:
            raise ShapeMismatchError(
                f"Expected a batched step of batch size {self.batch_size}, got {step!r}."
            )
        return step

    def _distribute_state(self, state: State) -> None:
        if self.batched_policy:
            self._policies[0].state = copy.deepcopy(state)
            return
        for policy, instance_state in zip(self._policies, unstack(state, self.batch_size)):
            policy.state = copy.deepcopy(instance_state)

    def _collect_state(self) -> State:
        if self.batched_policy:
            return self._policies[0].state
        return stack([policy.state for policy in self._policies])

    def _select_actions(self, current: Step[Observation, Reward]) -> tuple[Action, State]:
        """Policy side: batched action and the policy state after choosing it."""
        if self.batched_policy:
            action = self._policies[0].action(current)
            return action, self._collect_state()
        steps = current.unstack(self.batch_size)
        actions = [policy.action(s) for policy, s in zip(self._policies, steps)]
        return stack(actions), self._collect_state()

    def _advance(self, action: Action) -> Step[Observation, Reward]:
        """Environment side: batched next step for a batched action."""
        if self.batched_environment:
            return self._environments[0].step(action)
        actions = unstack(action, self.batch_size)
        return Step.stack([env.step(a) for env, a in zip(self._environments, actions)])

    def __repr__(self) -> str:
        return (
            f"StepBasedDriver(batch_size={self.batch_size}, max_steps={self.max_steps}, "
            f"max_episodes={self.max_episodes})"
        )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _materialise(instance: Any, batched: bool, batch_size: int) -> list[Any]:
    if batched:
        return [instance]
    return [instance.copy() for _ in range(batch_size)]


def _reseed(instances: list[Any], seed: int) -> None:
    if len(instances) == 1 and instances[0].batched:
        instances[0].reseed(seed)
        return
    for i, instance in enumerate(instances):
        instance.reseed(derive_seed(seed, i))
