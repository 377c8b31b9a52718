"""Abstract base environment: the environment contract.

Every environment (concrete simulators, adapters, wrappers, vectorised
views) implements this interface.

This class enforces:
  1. Lifecycle: reset() produces a FIRST step
  2. Step: step() validates the action and returns a Step whose kind
     is TRANSITION or LAST; the call after a LAST step behaves
     as an implicit reset() and returns FIRST (auto-reset)
  3. Spaces: action_space / observation_space describe legal values
  4. Batching: batched environments consume and emit stacked values
  5. Copying: copy() returns an independent instance for batching
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, Protocol

from rlcore.core.errors import InvalidActionError
from rlcore.core.types import Action, Observation, Reward, Step


class Renderer(Protocol):
    """External collaborator that knows how to display an observation."""

    def render(self, observation: Any) -> None:
        ...


class Environment(ABC, Generic[Action, Observation, Reward]):
    """Abstract environment contract.  Domain-agnostic."""

    #: Batched environments step a whole batch of instances per call.
    batched: bool = False

    # ------------------------------------------------------------------
    # Spaces
    # ------------------------------------------------------------------

    @property
    @abstractmethod
    def action_space(self):
        """Space of legal (per-instance) actions."""
        ...

    @property
    @abstractmethod
    def observation_space(self):
        """Space of (per-instance) observations."""
        ...

    @property
    def batch_size(self) -> int:
        """Number of instances stepped per call (1 for unbatched environments)."""
        return 1

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    def step(self, action: Action) -> Step[Observation, Reward]:
        """Advance one timestep.

        Raises InvalidActionError if the action is outside the action space.
        """
        ...

    @abstractmethod
    def reset(self) -> Step[Observation, Reward]:
        """Start a new episode and return its FIRST step."""
        ...

    @abstractmethod
    def copy(self) -> Environment[Action, Observation, Reward]:
        """Return an independent instance with the same configuration."""
        ...

    def reseed(self, seed: int | None) -> None:
        """Re-seed the internal RNG.  Deterministic environments ignore this."""

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def render(self, observation: Observation, renderer: Renderer) -> None:
        """Forward an observation to an external renderer."""
        renderer.render(observation)

    def _check_action(self, action: Action) -> None:
        if not self.action_space.contains(action):
            raise InvalidActionError(
                f"Invalid action {action!r} for action space {self.action_space!r}."
            )
