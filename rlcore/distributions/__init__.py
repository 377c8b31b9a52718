"""Probability distributions consumed by policies and spaces."""

from rlcore.distributions.base import Distribution
from rlcore.distributions.bernoulli import Bernoulli
from rlcore.distributions.categorical import Categorical
from rlcore.distributions.composite import Independent, Product
from rlcore.distributions.deterministic import Deterministic
from rlcore.distributions.uniform import DiscreteUniform, Uniform

__all__ = [
    "Bernoulli",
    "Categorical",
    "Deterministic",
    "DiscreteUniform",
    "Distribution",
    "Independent",
    "Product",
    "Uniform",
]
