"""Driver listeners computing episode metrics."""

from rlcore.metrics.episode_metrics import (
    AverageEpisodeLength,
    AverageEpisodeReward,
    EpisodeMetric,
    TotalCumulativeReward,
)

__all__ = [
    "AverageEpisodeLength",
    "AverageEpisodeReward",
    "EpisodeMetric",
    "TotalCumulativeReward",
]
