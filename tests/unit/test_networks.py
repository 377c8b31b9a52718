"""Tests for the torch actor networks (skipped when torch is not installed)."""

import numpy as np
import pytest

torch = pytest.importorskip("torch")

from rlcore.core.types import Step, StepKind  # noqa: E402
from rlcore.distributions import Categorical  # noqa: E402
from rlcore.policies import ActorPolicy, GreedyPolicy  # noqa: E402
from rlcore.policies.networks import (  # noqa: E402
    CategoricalActorNetwork,
    RecurrentCategoricalActorNetwork,
)

OBS_DIM = 4
NUM_ACTIONS = 3


def _step(batch: int | None = None) -> Step:
    if batch is None:
        return Step(StepKind.FIRST, np.ones(OBS_DIM))
    return Step(np.full(batch, int(StepKind.FIRST)), np.ones((batch, OBS_DIM)), np.zeros(batch))


class TestCategoricalActorNetwork:
    def test_unbatched_distribution(self) -> None:
        torch.manual_seed(0)
        net = CategoricalActorNetwork(OBS_DIM, NUM_ACTIONS)
        distribution, state = net.evaluate(np.ones(OBS_DIM), None)
        assert isinstance(distribution, Categorical)
        assert distribution.num_categories == NUM_ACTIONS
        assert state is None
        assert distribution.probabilities.sum() == pytest.approx(1.0)

    def test_batched_distribution(self) -> None:
        net = CategoricalActorNetwork(OBS_DIM, NUM_ACTIONS, hidden=8)
        distribution, _ = net.evaluate(np.zeros((5, OBS_DIM)), None)
        assert distribution.log_probabilities.shape == (5, NUM_ACTIONS)

    def test_evaluation_does_not_track_gradients(self) -> None:
        net = CategoricalActorNetwork(OBS_DIM, NUM_ACTIONS)
        net.evaluate(np.ones(OBS_DIM), None)
        assert all(p.grad is None for p in net.parameters())

    def test_actor_policy_actions(self) -> None:
        policy = ActorPolicy(CategoricalActorNetwork(OBS_DIM, NUM_ACTIONS), seed=1)
        actions = policy.action(_step(batch=4))
        assert actions.shape == (4,)
        assert np.all((actions >= 0) & (actions < NUM_ACTIONS))


class TestRecurrentCategoricalActorNetwork:
    def test_initial_state_is_zero(self) -> None:
        net = RecurrentCategoricalActorNetwork(OBS_DIM, NUM_ACTIONS, hidden=16)
        np.testing.assert_array_equal(net.initial_state(), np.zeros(16, dtype=np.float32))

    def test_state_is_threaded_through_the_policy(self) -> None:
        net = RecurrentCategoricalActorNetwork(OBS_DIM, NUM_ACTIONS, hidden=16)
        policy = ActorPolicy(net, batched=False, seed=1)
        initial = policy.state.copy()
        policy.action(_step())
        assert policy.state.shape == (16,)
        assert not np.array_equal(policy.state, initial)
        np.testing.assert_array_equal(initial, np.zeros(16))

    def test_batched_state(self) -> None:
        net = RecurrentCategoricalActorNetwork(OBS_DIM, NUM_ACTIONS, hidden=8)
        state = np.zeros((3, 8), dtype=np.float32)
        distribution, next_state = net.evaluate(np.ones((3, OBS_DIM)), state)
        assert distribution.log_probabilities.shape == (3, NUM_ACTIONS)
        assert next_state.shape == (3, 8)
        np.testing.assert_array_equal(state, 0.0)

    def test_greedy_over_recurrent_actor_is_deterministic(self) -> None:
        torch.manual_seed(0)
        net = RecurrentCategoricalActorNetwork(OBS_DIM, NUM_ACTIONS, hidden=8)
        a = GreedyPolicy(ActorPolicy(net, batched=False, seed=1))
        b = a.copy()
        assert [int(a.action(_step())) for _ in range(5)] == [int(b.action(_step())) for _ in range(5)]
