"""Tests for the episode metric listeners."""

import numpy as np
import pytest

from rlcore.config.schema import MetricsConfig
from rlcore.core.errors import PreconditionError, ShapeMismatchError
from rlcore.core.types import Step, StepKind, TrajectoryStep
from rlcore.drivers import StepBasedDriver
from rlcore.metrics import AverageEpisodeLength, AverageEpisodeReward, TotalCumulativeReward

from toy_envs import CounterEnvironment, ParityPolicy

F, T, L = StepKind.FIRST, StepKind.TRANSITION, StepKind.LAST


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _trajectory(current: list[StepKind], following: list[StepKind], rewards: list[float]) -> TrajectoryStep:
    n = len(current)
    return TrajectoryStep(
        current_step=Step(np.array(current, dtype=np.int64), np.zeros((n, 1)), np.zeros(n)),
        next_step=Step(np.array(following, dtype=np.int64), np.zeros((n, 1)), np.array(rewards)),
        action=np.zeros(n, dtype=np.int64),
    )


def _episode(length: int, reward: float = 1.0) -> list[TrajectoryStep]:
    """One single-instance episode of ``length`` steps followed by its boundary hop."""
    kinds = [F] + [T] * (length - 1) + [L]
    steps = [_trajectory([kinds[i]], [kinds[i + 1]], [reward]) for i in range(length)]
    steps.append(_trajectory([L], [F], [0.0]))
    return steps


def _feed(metric, trajectories: list[TrajectoryStep]) -> None:
    for trajectory in trajectories:
        metric(trajectory)


# ---------------------------------------------------------------------------
# AverageEpisodeLength
# ---------------------------------------------------------------------------

class TestAverageEpisodeLength:
    def test_empty_buffer_reports_zero(self) -> None:
        assert AverageEpisodeLength(batch_size=1, buffer_size=5).value() == 0.0

    def test_mean_of_completed_episodes(self) -> None:
        metric = AverageEpisodeLength(batch_size=1, buffer_size=10)
        _feed(metric, _episode(2) + _episode(4))
        assert metric.value() == pytest.approx(3.0)

    def test_only_the_most_recent_episodes_count(self) -> None:
        metric = AverageEpisodeLength(batch_size=1, buffer_size=2)
        _feed(metric, _episode(1) + _episode(2) + _episode(4))
        assert metric.value() == pytest.approx(3.0)

    def test_unfinished_episode_is_ignored(self) -> None:
        metric = AverageEpisodeLength(batch_size=1, buffer_size=10)
        _feed(metric, _episode(2) + _episode(6)[:3])
        assert metric.value() == pytest.approx(2.0)

    def test_reset(self) -> None:
        metric = AverageEpisodeLength(batch_size=1, buffer_size=10)
        _feed(metric, _episode(3) + _episode(5)[:2])
        metric.reset()
        assert metric.value() == 0.0
        _feed(metric, _episode(1))
        assert metric.value() == pytest.approx(1.0)


# ---------------------------------------------------------------------------
# AverageEpisodeReward
# ---------------------------------------------------------------------------

class TestAverageEpisodeReward:
    def test_mean_return(self) -> None:
        metric = AverageEpisodeReward(batch_size=1, buffer_size=10)
        _feed(metric, _episode(2, reward=1.0) + _episode(3, reward=2.0))
        assert metric.value() == pytest.approx((2.0 + 6.0) / 2)

    def test_boundary_rewards_are_skipped(self) -> None:
        metric = AverageEpisodeReward(batch_size=1, buffer_size=10)
        metric(_trajectory([L], [F], [100.0]))
        _feed(metric, _episode(1, reward=1.0))
        assert metric.value() == pytest.approx(1.0)

    def test_instances_are_tracked_separately(self) -> None:
        metric = AverageEpisodeReward(batch_size=2, buffer_size=10)
        metric(_trajectory([F, F], [T, L], [1.0, 5.0]))
        metric(_trajectory([T, L], [L, F], [1.0, 0.0]))
        assert metric.value() == pytest.approx((5.0 + 2.0) / 2)


# ---------------------------------------------------------------------------
# TotalCumulativeReward
# ---------------------------------------------------------------------------

class TestTotalCumulativeReward:
    def test_running_sum_per_instance(self) -> None:
        metric = TotalCumulativeReward(batch_size=2)
        metric(_trajectory([F, F], [T, T], [1.0, 2.0]))
        metric(_trajectory([T, T], [L, T], [1.0, 2.0]))
        metric(_trajectory([L, T], [F, T], [9.0, 2.0]))
        np.testing.assert_allclose(metric.value(), [2.0, 6.0])

    def test_value_is_a_copy(self) -> None:
        metric = TotalCumulativeReward(batch_size=1)
        metric(_trajectory([F], [T], [1.0]))
        metric.value()[0] = 50.0
        np.testing.assert_allclose(metric.value(), [1.0])

    def test_reset(self) -> None:
        metric = TotalCumulativeReward(batch_size=1)
        metric(_trajectory([F], [T], [1.0]))
        metric.reset()
        np.testing.assert_allclose(metric.value(), [0.0])


# ---------------------------------------------------------------------------
# Validation and driver integration
# ---------------------------------------------------------------------------

class TestMetricValidation:
    def test_batch_size_mismatch(self) -> None:
        metric = TotalCumulativeReward(batch_size=2)
        with pytest.raises(ShapeMismatchError):
            metric(_trajectory([F], [T], [1.0]))

    @pytest.mark.parametrize("kwargs", [{"batch_size": 0, "buffer_size": 1}, {"batch_size": 1, "buffer_size": 0}])
    def test_invalid_sizes(self, kwargs: dict) -> None:
        with pytest.raises(PreconditionError):
            AverageEpisodeLength(**kwargs)


class TestWithDriver:
    def test_metrics_as_driver_listeners(self) -> None:
        buffer_size = MetricsConfig().buffer_size
        length = AverageEpisodeLength(batch_size=2, buffer_size=buffer_size)
        reward = AverageEpisodeReward(batch_size=2, buffer_size=buffer_size)
        total = TotalCumulativeReward(batch_size=2)

        env = CounterEnvironment(episode_length=3, reward=1.0)
        driver = StepBasedDriver(env, ParityPolicy(), max_episodes=4, batch_size=2)
        driver.run(listeners=[length, reward, total])

        assert driver.num_episodes == 4
        assert length.value() == pytest.approx(3.0)
        assert reward.value() == pytest.approx(3.0)
        np.testing.assert_allclose(total.value(), [6.0, 6.0])
