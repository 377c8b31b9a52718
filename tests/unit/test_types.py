"""Tests for Step, TrajectoryStep and PolicyStep."""

import dataclasses

import numpy as np
import pytest

from rlcore.core.types import PolicyStep, Step, StepKind, TrajectoryStep


def _step(kind: StepKind, t: float = 0.0, reward: float = 0.0) -> Step:
    return Step(kind=kind, observation=np.array([t]), reward=reward)


# ---------------------------------------------------------------------------
# Step
# ---------------------------------------------------------------------------

class TestStep:
    @pytest.mark.parametrize(
        "kind, first, transition, last",
        [
            (StepKind.FIRST, True, False, False),
            (StepKind.TRANSITION, False, True, False),
            (StepKind.LAST, False, False, True),
        ],
    )
    def test_predicates(self, kind: StepKind, first: bool, transition: bool, last: bool) -> None:
        step = _step(kind)
        assert step.is_first() is first
        assert step.is_transition() is transition
        assert step.is_last() is last
        assert not step.batched

    def test_batched_predicates_are_arrays(self) -> None:
        step = Step.stack([_step(StepKind.FIRST), _step(StepKind.LAST)])
        assert step.batched
        np.testing.assert_array_equal(step.is_first(), [True, False])
        np.testing.assert_array_equal(step.is_last(), [False, True])
        np.testing.assert_array_equal(step.is_transition(), [False, False])

    def test_replace_returns_a_new_step(self) -> None:
        step = _step(StepKind.TRANSITION, reward=1.0)
        ended = step.replace(kind=StepKind.LAST)
        assert ended.kind == StepKind.LAST
        assert ended.reward == 1.0
        assert step.kind == StepKind.TRANSITION

    def test_is_immutable(self) -> None:
        step = _step(StepKind.FIRST)
        with pytest.raises(dataclasses.FrozenInstanceError):
            step.reward = 1.0  # type: ignore[misc]

    def test_default_reward_is_zero(self) -> None:
        assert Step(StepKind.FIRST, np.zeros(1)).reward == 0.0

    def test_kind_codes(self) -> None:
        assert [int(k) for k in StepKind] == [0, 1, 2]


# ---------------------------------------------------------------------------
# TrajectoryStep
# ---------------------------------------------------------------------------

class TestTrajectoryStep:
    def test_boundary_is_a_last_current_step(self) -> None:
        hop = TrajectoryStep(_step(StepKind.LAST), _step(StepKind.FIRST), action=0)
        assert hop.is_boundary()
        assert not hop.is_last()
        assert not hop.is_transition()

    def test_last_is_a_last_next_step(self) -> None:
        end = TrajectoryStep(_step(StepKind.TRANSITION), _step(StepKind.LAST), action=1)
        assert end.is_last()
        assert not end.is_boundary()

    def test_transition_needs_both_transition_kinds(self) -> None:
        mid = TrajectoryStep(_step(StepKind.TRANSITION), _step(StepKind.TRANSITION), action=1)
        start = TrajectoryStep(_step(StepKind.FIRST), _step(StepKind.TRANSITION), action=1)
        assert mid.is_transition()
        assert not start.is_transition()
        assert start.is_first()

    def test_batched_predicates(self) -> None:
        trajectory = TrajectoryStep.stack([
            TrajectoryStep(_step(StepKind.LAST), _step(StepKind.FIRST), np.int64(0)),
            TrajectoryStep(_step(StepKind.TRANSITION), _step(StepKind.LAST), np.int64(1)),
        ])
        np.testing.assert_array_equal(trajectory.is_boundary(), [True, False])
        np.testing.assert_array_equal(trajectory.is_last(), [False, True])

    def test_policy_state_defaults_to_none(self) -> None:
        trajectory = TrajectoryStep(_step(StepKind.FIRST), _step(StepKind.LAST), action=0)
        assert trajectory.policy_state is None


class TestPolicyStep:
    def test_fields(self) -> None:
        result = PolicyStep("distribution")
        assert result.distribution == "distribution"
        assert result.state is None
        distribution, state = PolicyStep("d", 3)
        assert (distribution, state) == ("d", 3)
