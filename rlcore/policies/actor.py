"""Actor policy: action distributions computed by a learned network.

The network is any object exposing::

    initial_state() -> State
    evaluate(observation, state) -> tuple[Distribution, State]

State (for example recurrent memory) is threaded explicitly through
``policy_step``; the network itself holds parameters only.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

from rlcore.core.types import PolicyStep, Step
from rlcore.distributions.base import Distribution
from rlcore.policies.base import ProbabilisticPolicy

Normalizer = Callable[[Any], Any]


class ActorNetwork(Protocol):
    def initial_state(self) -> Any:
        ...

    def evaluate(self, observation: Any, state: Any) -> tuple[Distribution, Any]:
        ...


class ActorPolicy(ProbabilisticPolicy[Any, Any, Any, Any]):
    """Probabilistic policy backed by an actor network.

    Parameters
    ----------
    actor_network : ActorNetwork
        Maps ``(observation, state)`` to ``(distribution, state)``.
    observation_normalizer : callable | None
        Applied to every observation before it reaches the network, e.g. an
        ``ObservationNormalizer``.  Stateful normalizers are copied with
        the policy, so each driver copy keeps its own statistics.
    batched : bool
        Whether the network consumes stacked observations.  Default True.
    seed : int | None
        Seed of the sampling RNG.
    """

    def __init__(
        self,
        actor_network: ActorNetwork,
        observation_normalizer: Normalizer | None = None,
        batched: bool = True,
        seed: int | None = None,
    ) -> None:
        self.actor_network = actor_network
        self.observation_normalizer = observation_normalizer
        self.batched = batched
        super().__init__(seed)

    def initial_state(self) -> Any:
        return self.actor_network.initial_state()

    def policy_step(self, step: Step, state: Any) -> PolicyStep:
        observation = step.observation
        if self.observation_normalizer is not None:
            observation = self.observation_normalizer(observation)
        distribution, next_state = self.actor_network.evaluate(observation, state)
        return PolicyStep(distribution, next_state)

    def __repr__(self) -> str:
        return f"ActorPolicy({type(self.actor_network).__name__}, batched={self.batched})"
