"""Policies package: registry and factory for pluggable policies."""

from __future__ import annotations

from rlcore.policies.actor import ActorPolicy
from rlcore.policies.base import Policy, ProbabilisticPolicy
from rlcore.policies.greedy import GreedyPolicy
from rlcore.policies.normalization import ObservationNormalizer, RunningMeanStd
from rlcore.policies.random_policy import RandomPolicy

POLICY_REGISTRY: dict[str, type[Policy]] = {
    "random": RandomPolicy,
    "greedy": GreedyPolicy,
    "actor": ActorPolicy,
}


def create_policy(name: str, **kwargs) -> Policy:
    """Instantiate a policy by registry name.

    The torch networks live in ``rlcore.policies.networks`` and are only
    imported by callers that build an actor network, so the registry works
    without torch installed.

    Raises KeyError if the name is not registered.
    """
    cls = POLICY_REGISTRY[name]
    return cls(**kwargs)


__all__ = [
    "ActorPolicy",
    "GreedyPolicy",
    "ObservationNormalizer",
    "POLICY_REGISTRY",
    "Policy",
    "ProbabilisticPolicy",
    "RandomPolicy",
    "RunningMeanStd",
    "create_policy",
]
