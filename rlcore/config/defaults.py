"""Default rollout configuration.

Provides a sensible baseline for quick experiments.
All values are explicit.
"""

from rlcore.config.schema import DriverConfig, MetricsConfig, RolloutConfig, WrapperConfig


def default_config(seed: int = 42) -> RolloutConfig:
    """Return a complete, valid default rollout config."""
    return RolloutConfig(
        driver=DriverConfig(
            max_steps=1_000,
            max_episodes=None,
            batch_size=1,
            seed=seed,
        ),
        wrappers=WrapperConfig(
            time_limit=200,
            action_repeat=None,
            run_statistics=True,
        ),
        metrics=MetricsConfig(buffer_size=10),
    )
