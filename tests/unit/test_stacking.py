"""Tests for the stack / unstack batching contract.

Covers:
  - round trips for arrays, scalars, None, structures and steps
  - container types are preserved
  - shape and batch-size mismatches are rejected
"""

from typing import NamedTuple

import numpy as np
import pytest

from rlcore.core.errors import ShapeMismatchError
from rlcore.core.stacking import Stackable, infer_batch_size, stack, unstack
from rlcore.core.types import Step, StepKind, TrajectoryStep


class Pair(NamedTuple):
    left: np.ndarray
    right: float


# ---------------------------------------------------------------------------
# Round trips
# ---------------------------------------------------------------------------

class TestRoundTrip:
    def test_arrays(self) -> None:
        xs = [np.arange(3) + i for i in range(4)]
        stacked = stack(xs)
        assert stacked.shape == (4, 3)
        for original, restored in zip(xs, unstack(stacked)):
            np.testing.assert_array_equal(original, restored)

    def test_scalars(self) -> None:
        stacked = stack([1.0, 2.5, -3.0])
        np.testing.assert_array_equal(stacked, [1.0, 2.5, -3.0])
        assert [float(x) for x in unstack(stacked)] == [1.0, 2.5, -3.0]

    def test_none(self) -> None:
        assert stack([None, None, None]) is None
        assert unstack(None, 3) == [None, None, None]

    def test_empty_tuple_round_trips_with_size(self) -> None:
        stacked = stack([(), ()])
        assert stacked == ()
        assert unstack(stacked, 2) == [(), ()]
        with pytest.raises(ShapeMismatchError, match="empty structure"):
            unstack(stacked)

    def test_named_tuple_keeps_its_type(self) -> None:
        xs = [Pair(np.zeros(2) + i, float(i)) for i in range(3)]
        stacked = stack(xs)
        assert isinstance(stacked, Pair)
        assert stacked.left.shape == (3, 2)

        restored = unstack(stacked)
        assert all(isinstance(p, Pair) for p in restored)
        for original, p in zip(xs, restored):
            np.testing.assert_array_equal(original.left, p.left)
            assert float(p.right) == original.right

    def test_plain_tuple_and_list(self) -> None:
        stacked = stack([(1, [2, 3]), (4, [5, 6])])
        assert isinstance(stacked, tuple)
        assert isinstance(stacked[1], list)
        assert [(int(a), [int(b), int(c)]) for a, (b, c) in unstack(stacked)] == [
            (1, [2, 3]),
            (4, [5, 6]),
        ]

    def test_dict(self) -> None:
        xs = [{"a": np.ones(2) * i, "b": None} for i in range(2)]
        stacked = stack(xs)
        assert stacked["a"].shape == (2, 2)
        assert stacked["b"] is None
        restored = unstack(stacked)
        np.testing.assert_array_equal(restored[1]["a"], [1.0, 1.0])
        assert restored[0]["b"] is None

    def test_steps(self) -> None:
        xs = [
            Step(StepKind.FIRST, np.array([0.0]), 0.0),
            Step(StepKind.TRANSITION, np.array([1.0]), 1.0),
            Step(StepKind.LAST, np.array([2.0]), 2.0),
        ]
        stacked = stack(xs)
        assert isinstance(stacked, Step)
        assert stacked.batched
        np.testing.assert_array_equal(stacked.kind, [0, 1, 2])

        restored = unstack(stacked)
        assert [s.kind for s in restored] == [StepKind.FIRST, StepKind.TRANSITION, StepKind.LAST]
        assert all(isinstance(s.kind, StepKind) for s in restored)
        for original, s in zip(xs, restored):
            np.testing.assert_array_equal(original.observation, s.observation)
            assert float(s.reward) == original.reward

    def test_trajectory_steps(self) -> None:
        first = Step(StepKind.FIRST, np.array([0.0]), 0.0)
        last = Step(StepKind.LAST, np.array([1.0]), 1.0)
        xs = [TrajectoryStep(first, last, np.int64(i), None) for i in range(2)]
        stacked = stack(xs)
        assert isinstance(stacked, TrajectoryStep)
        np.testing.assert_array_equal(stacked.action, [0, 1])
        assert stacked.policy_state is None

        restored = unstack(stacked, 2)
        assert [int(t.action) for t in restored] == [0, 1]
        assert all(t.next_step.kind == StepKind.LAST for t in restored)

    def test_step_is_stackable(self) -> None:
        assert isinstance(Step(StepKind.FIRST, 0.0), Stackable)
        assert not isinstance(np.zeros(2), Stackable)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class TestStackingErrors:
    def test_empty_input(self) -> None:
        with pytest.raises(ShapeMismatchError, match="empty"):
            stack([])

    def test_different_shapes(self) -> None:
        with pytest.raises(ShapeMismatchError, match="different shapes"):
            stack([np.zeros(2), np.zeros(3)])

    def test_none_mixed_with_values(self) -> None:
        with pytest.raises(ShapeMismatchError):
            stack([None, 1.0])

    def test_structures_of_different_length(self) -> None:
        with pytest.raises(ShapeMismatchError):
            stack([(1, 2), (1, 2, 3)])

    def test_dicts_with_different_keys(self) -> None:
        with pytest.raises(ShapeMismatchError, match="different keys"):
            stack([{"a": 1}, {"b": 1}])

    def test_unstack_none_needs_size(self) -> None:
        with pytest.raises(ShapeMismatchError, match="batch size is required"):
            unstack(None)

    def test_unstack_scalar(self) -> None:
        with pytest.raises(ShapeMismatchError, match="without a batch axis"):
            unstack(np.float64(1.0))

    def test_unstack_wrong_size(self) -> None:
        with pytest.raises(ShapeMismatchError, match="size 3"):
            unstack(np.zeros((2, 4)), 3)

    def test_fields_disagree_on_batch_size(self) -> None:
        with pytest.raises(ShapeMismatchError, match="disagree"):
            unstack((np.zeros(2), np.zeros(3)))

    def test_unbatched_step_cannot_be_unstacked(self) -> None:
        with pytest.raises(ShapeMismatchError, match="not batched"):
            Step(StepKind.FIRST, 0.0).unstack()


class TestInferBatchSize:
    def test_first_array_leaf_wins(self) -> None:
        assert infer_batch_size((None, {"x": np.zeros((5, 2))})) == 5

    def test_no_batch_axis(self) -> None:
        assert infer_batch_size(None) is None
        assert infer_batch_size(np.float64(3.0)) is None
