"""Gymnasium adapter.

Thin wrapper that translates between the gymnasium ``Env`` API
(``reset() -> (obs, info)``, ``step() -> (obs, reward, terminated,
truncated, info)``) and the rlcore Environment contract (Step records with
FIRST / TRANSITION / LAST kinds and auto-reset).
"""

from __future__ import annotations

from typing import Any

import gymnasium
import numpy as np
from gymnasium import spaces as gym_spaces

from rlcore.core.base_env import Environment
from rlcore.core.errors import PreconditionError
from rlcore.core.types import Step, StepKind
from rlcore.spaces import Box, Discrete, DiscreteBox, MultiBinary, MultiDiscrete, Space


# ---------------------------------------------------------------------------
# Space conversion
# ---------------------------------------------------------------------------

def convert_space(space: gymnasium.Space) -> Space:
    """Convert a gymnasium space into the equivalent rlcore space."""
    if isinstance(space, gym_spaces.Discrete):
        if int(space.start) != 0:
            raise PreconditionError("Discrete spaces with a non-zero start are not supported.")
        return Discrete(int(space.n))
    if isinstance(space, gym_spaces.MultiDiscrete):
        if space.nvec.ndim != 1:
            raise PreconditionError("Only one-dimensional MultiDiscrete spaces are supported.")
        return MultiDiscrete([int(n) for n in space.nvec])
    if isinstance(space, gym_spaces.MultiBinary):
        if np.ndim(space.n) != 0:
            raise PreconditionError("Only one-dimensional MultiBinary spaces are supported.")
        return MultiBinary(int(space.n))
    if isinstance(space, gym_spaces.Box):
        if np.issubdtype(space.dtype, np.integer):
            return DiscreteBox(space.low, space.high)
        return Box(space.low, space.high)
    raise PreconditionError(f"Unsupported gymnasium space: {space!r}")


# ---------------------------------------------------------------------------
# Environment
# ---------------------------------------------------------------------------

class GymnasiumEnvironment(Environment[Any, np.ndarray, float]):
    """rlcore Environment backed by a gymnasium environment.

    Parameters
    ----------
    env : str | gymnasium.Env
        A registered environment id, or an already constructed environment.
    seed : int | None
        Seed passed to the first ``reset`` (and to the first reset after
        ``reseed``).  None leaves the gymnasium RNG unseeded.
    **make_kwargs
        Forwarded to ``gymnasium.make`` when ``env`` is an id.
    """

    def __init__(self, env: str | gymnasium.Env, seed: int | None = None, **make_kwargs: Any) -> None:
        if isinstance(env, str):
            env = gymnasium.make(env, **make_kwargs)
        self._env = env
        self._seed = seed
        self._seed_pending = True
        self._needs_reset = True
        self._action_space = convert_space(env.action_space)
        self._observation_space = convert_space(env.observation_space)

    @property
    def action_space(self) -> Space:
        return self._action_space

    @property
    def observation_space(self) -> Space:
        return self._observation_space

    @property
    def gymnasium_env(self) -> gymnasium.Env:
        return self._env

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def reset(self) -> Step[np.ndarray, float]:
        seed = self._seed if self._seed_pending else None
        observation, _info = self._env.reset(seed=seed)
        self._seed_pending = False
        self._needs_reset = False
        return Step(kind=StepKind.FIRST, observation=np.asarray(observation), reward=0.0)

    def step(self, action: Any) -> Step[np.ndarray, float]:
        self._check_action(action)
        if self._needs_reset:
            return self.reset()

        observation, reward, terminated, truncated, _info = self._env.step(
            self._convert_action(action)
        )
        done = bool(terminated or truncated)
        self._needs_reset = done
        return Step(
            kind=StepKind.LAST if done else StepKind.TRANSITION,
            observation=np.asarray(observation),
            reward=float(reward),
        )

    def copy(self) -> GymnasiumEnvironment:
        spec = self._env.spec
        if spec is None:
            raise PreconditionError(
                "Only environments created from a registered id can be copied."
            )
        return GymnasiumEnvironment(gymnasium.make(spec), seed=self._seed)

    def reseed(self, seed: int | None) -> None:
        self._seed = seed
        self._seed_pending = True

    def close(self) -> None:
        self._env.close()

    # ------------------------------------------------------------------
    # Action conversion
    # ------------------------------------------------------------------

    def _convert_action(self, action: Any) -> Any:
        gym_space = self._env.action_space
        if isinstance(gym_space, gym_spaces.Discrete):
            return int(np.asarray(action))
        return np.asarray(action, dtype=gym_space.dtype)

    def __repr__(self) -> str:
        spec = self._env.spec
        name = spec.id if spec is not None else type(self._env).__name__
        return f"GymnasiumEnvironment({name!r})"
