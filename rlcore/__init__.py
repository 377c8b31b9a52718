"""rlcore: the interaction core of a reinforcement-learning library.

Environments emit ``Step`` records, policies turn them into actions and a
driver pairs the two, streaming ``TrajectoryStep`` records to listeners.
"""

from rlcore.core.base_env import Environment, Renderer
from rlcore.core.errors import (
    InvalidActionError,
    PreconditionError,
    RLCoreError,
    ShapeMismatchError,
)
from rlcore.core.stacking import Stackable, stack, unstack
from rlcore.core.types import PolicyStep, Step, StepKind, TrajectoryStep
from rlcore.drivers import Listener, RunResult, StepBasedDriver
from rlcore.policies import (
    ActorPolicy,
    GreedyPolicy,
    Policy,
    ProbabilisticPolicy,
    RandomPolicy,
    create_policy,
)

__version__ = "0.1.0"

__all__ = [
    "ActorPolicy",
    "Environment",
    "GreedyPolicy",
    "InvalidActionError",
    "Listener",
    "Policy",
    "PolicyStep",
    "PreconditionError",
    "ProbabilisticPolicy",
    "RLCoreError",
    "RandomPolicy",
    "Renderer",
    "RunResult",
    "ShapeMismatchError",
    "Stackable",
    "Step",
    "StepBasedDriver",
    "StepKind",
    "TrajectoryStep",
    "create_policy",
    "stack",
    "unstack",
]
