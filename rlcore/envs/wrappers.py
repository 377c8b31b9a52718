"""Environment wrappers.

A wrapper owns an inner environment, exposes the same contract and only
intercepts what it needs; everything else is forwarded.  Wrappers nest in
any order, e.g. ``TimeLimit(ActionRepeat(RunStatistics(env), 4), 100)``.

All wrappers here operate on unbatched environments; wrap each instance
before vectorising.
"""

from __future__ import annotations

import logging

from rlcore.config.schema import WrapperConfig
from rlcore.core.base_env import Environment, Renderer
from rlcore.core.errors import PreconditionError
from rlcore.core.types import Action, Observation, Reward, Step, StepKind

logger = logging.getLogger(__name__)


class Wrapper(Environment[Action, Observation, Reward]):
    """Base decorator that forwards everything to the wrapped environment."""

    def __init__(self, environment: Environment[Action, Observation, Reward]) -> None:
        if environment.batched:
            raise PreconditionError(
                f"{type(self).__name__} requires an unbatched environment."
            )
        self.wrapped = environment

    @property
    def action_space(self):
        return self.wrapped.action_space

    @property
    def observation_space(self):
        return self.wrapped.observation_space

    @property
    def unwrapped(self) -> Environment:
        """The innermost, non-wrapper environment."""
        env = self.wrapped
        while isinstance(env, Wrapper):
            env = env.wrapped
        return env

    def step(self, action: Action) -> Step[Observation, Reward]:
        return self.wrapped.step(action)

    def reset(self) -> Step[Observation, Reward]:
        return self.wrapped.reset()

    def copy(self) -> Wrapper[Action, Observation, Reward]:
        return type(self)(self.wrapped.copy())

    def reseed(self, seed: int | None) -> None:
        self.wrapped.reseed(seed)

    def render(self, observation: Observation, renderer: Renderer) -> None:
        self.wrapped.render(observation, renderer)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.wrapped!r})"


# ---------------------------------------------------------------------------
# Time limit
# ---------------------------------------------------------------------------

class TimeLimit(Wrapper[Action, Observation, Reward]):
    """Ends episodes after ``limit`` steps.

    The step that reaches the limit is returned with kind LAST.  The call
    after any LAST step is redirected to ``reset()`` whatever the action,
    so the wrapped environment never sees a stale action.
    """

    def __init__(self, environment: Environment[Action, Observation, Reward], limit: int) -> None:
        super().__init__(environment)
        if limit <= 0:
            raise PreconditionError(f"'limit' must be positive, got {limit}.")
        self.limit = limit
        self._num_steps = 0
        self._reset_required = False

    @property
    def num_steps(self) -> int:
        """Steps taken since the last reset."""
        return self._num_steps

    def step(self, action: Action) -> Step[Observation, Reward]:
        if self._reset_required:
            return self.reset()

        result = self.wrapped.step(action)
        if result.is_first():
            # The wrapped environment started a new episode on its own.
            self._num_steps = 0
            return result

        self._num_steps += 1
        if self._num_steps >= self.limit and not result.is_last():
            logger.debug("Time limit of %d steps reached, ending the episode.", self.limit)
            result = result.replace(kind=StepKind.LAST)

        if result.is_last():
            self._num_steps = 0
            self._reset_required = True
        return result

    def reset(self) -> Step[Observation, Reward]:
        self._num_steps = 0
        self._reset_required = False
        return self.wrapped.reset()

    def copy(self) -> TimeLimit[Action, Observation, Reward]:
        return TimeLimit(self.wrapped.copy(), self.limit)

    def __repr__(self) -> str:
        return f"TimeLimit({self.wrapped!r}, limit={self.limit})"


# ---------------------------------------------------------------------------
# Action repeat
# ---------------------------------------------------------------------------

class ActionRepeat(Wrapper[Action, Observation, Reward]):
    """Applies each action ``num_repeats`` times, summing the rewards.

    Repetition stops early at an episode boundary: after a LAST step, and
    after a FIRST step (an auto-reset must stay visible to the caller).
    """

    def __init__(
        self,
        environment: Environment[Action, Observation, Reward],
        num_repeats: int,
    ) -> None:
        super().__init__(environment)
        if num_repeats <= 1:
            raise PreconditionError(f"'num_repeats' must be greater than 1, got {num_repeats}.")
        self.num_repeats = num_repeats

    def step(self, action: Action) -> Step[Observation, Reward]:
        result = self.wrapped.step(action)
        reward = result.reward
        for _ in range(1, self.num_repeats):
            if result.is_last() or result.is_first():
                break
            result = self.wrapped.step(action)
            reward = reward + result.reward
        return result.replace(reward=reward)

    def copy(self) -> ActionRepeat[Action, Observation, Reward]:
        return ActionRepeat(self.wrapped.copy(), self.num_repeats)

    def __repr__(self) -> str:
        return f"ActionRepeat({self.wrapped!r}, num_repeats={self.num_repeats})"


# ---------------------------------------------------------------------------
# Run statistics
# ---------------------------------------------------------------------------

class RunStatistics(Wrapper[Action, Observation, Reward]):
    """Counts resets, episodes and steps without altering any step."""

    def __init__(self, environment: Environment[Action, Observation, Reward]) -> None:
        super().__init__(environment)
        self._num_resets = 0
        self._num_episodes = 0
        self._num_episode_steps = 0
        self._num_total_steps = 0

    @property
    def num_resets(self) -> int:
        """Number of FIRST steps produced."""
        return self._num_resets

    @property
    def num_episodes(self) -> int:
        """Number of LAST steps produced.

        Episodes cut short by an explicit ``reset()`` are not counted.
        """
        return self._num_episodes

    @property
    def num_episode_steps(self) -> int:
        """Steps taken in the current episode."""
        return self._num_episode_steps

    @property
    def num_total_steps(self) -> int:
        """Total number of non-FIRST steps."""
        return self._num_total_steps

    def step(self, action: Action) -> Step[Observation, Reward]:
        result = self.wrapped.step(action)
        if result.is_first():
            self._num_resets += 1
            self._num_episode_steps = 0
        else:
            self._num_episode_steps += 1
            self._num_total_steps += 1
        if result.is_last():
            self._num_episodes += 1
        return result

    def reset(self) -> Step[Observation, Reward]:
        self._num_resets += 1
        self._num_episode_steps = 0
        return self.wrapped.reset()


# ---------------------------------------------------------------------------
# Config-driven wrapping
# ---------------------------------------------------------------------------

def wrap_environment(environment: Environment, config: WrapperConfig) -> Environment:
    """Apply the wrappers enabled in ``config``.

    Order, innermost first: ActionRepeat, TimeLimit, RunStatistics.  The
    time limit therefore counts agent decisions, not repeated frames, and
    the statistics see exactly what the driver sees.
    """
    if config.action_repeat is not None:
        environment = ActionRepeat(environment, config.action_repeat)
    if config.time_limit is not None:
        environment = TimeLimit(environment, config.time_limit)
    if config.run_statistics:
        environment = RunStatistics(environment)
    return environment
