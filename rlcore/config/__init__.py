"""Rollout configuration models."""

from rlcore.config.defaults import default_config
from rlcore.config.schema import DriverConfig, MetricsConfig, RolloutConfig, WrapperConfig

__all__ = [
    "DriverConfig",
    "MetricsConfig",
    "RolloutConfig",
    "WrapperConfig",
    "default_config",
]
