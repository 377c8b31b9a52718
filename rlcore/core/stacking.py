"""Batching ("stacking") contract.

``stack`` turns a list of per-instance values into one batched value and
``unstack`` inverts it, so that ``unstack(stack(xs), len(xs)) == xs`` for
any non-empty list of equally shaped values.  The ``size`` argument is
optional whenever the batched value holds an array leaf; unit values
(``None``, empty tuples and structures of them) carry no batch axis, and
for those ``unstack`` needs ``size`` to recover the list.  The rules are
applied recursively:

  - arrays / scalars  -> ``np.stack`` along a new leading batch axis
  - ``None``          -> ``None`` (unit values carry no data)
  - tuple / list      -> field-wise, container type preserved
  - dict              -> key-wise, all dicts must share their keys
  - ``Stackable``     -> the type's own ``stack`` / ``unstack``

Python lists are treated as structures, not as array data: wrap array
data in ``np.ndarray`` before stacking it.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

import numpy as np

from rlcore.core.errors import ShapeMismatchError


@runtime_checkable
class Stackable(Protocol):
    """Types that know how to batch and unbatch themselves."""

    @classmethod
    def stack(cls, values: Sequence[Any]) -> Any:
        ...

    def unstack(self, size: int | None = None) -> list[Any]:
        ...


# ---------------------------------------------------------------------------
# Stack
# ---------------------------------------------------------------------------

def stack(values: Sequence[Any]) -> Any:
    """Combine per-instance values into one batched value."""
    values = list(values)
    if not values:
        raise ShapeMismatchError("Cannot stack an empty sequence.")

    first = values[0]
    if first is None:
        if any(v is not None for v in values):
            raise ShapeMismatchError("Cannot stack None together with other values.")
        return None
    if isinstance(first, Stackable):
        return type(first).stack(values)
    if isinstance(first, (tuple, list)):
        _check_same_length(values)
        fields = [stack([v[i] for v in values]) for i in range(len(first))]
        return _rebuild_sequence(first, fields)
    if isinstance(first, dict):
        keys = list(first)
        for v in values[1:]:
            if not isinstance(v, dict) or set(v) != set(keys):
                raise ShapeMismatchError(
                    f"Cannot stack dicts with different keys: {sorted(keys)} vs {sorted(v)}"
                )
        return {k: stack([v[k] for v in values]) for k in keys}
    return _stack_arrays(values)


def _stack_arrays(values: list[Any]) -> np.ndarray:
    arrays = [np.asarray(v) for v in values]
    shapes = {a.shape for a in arrays}
    if len(shapes) > 1:
        raise ShapeMismatchError(
            f"Cannot stack values with different shapes: {sorted(shapes)}"
        )
    return np.stack(arrays, axis=0)


def _check_same_length(values: list[Any]) -> None:
    first = values[0]
    for v in values[1:]:
        if type(v) is not type(first) or len(v) != len(first):
            raise ShapeMismatchError(
                f"Cannot stack structures of different types or lengths: {first!r} vs {v!r}"
            )


def _rebuild_sequence(example: tuple | list, fields: list[Any]) -> tuple | list:
    if isinstance(example, list):
        return fields
    if hasattr(example, "_fields"):  # named tuple
        return type(example)(*fields)
    return tuple(fields)


# ---------------------------------------------------------------------------
# Unstack
# ---------------------------------------------------------------------------

def unstack(value: Any, size: int | None = None) -> list[Any]:
    """Split a batched value into its per-instance values.

    ``size`` is the expected batch size.  It is required for values that
    carry no batch axis of their own (``None`` and empty structures) and
    is checked against the leading axis of everything else.
    """
    if value is None:
        if size is None:
            raise ShapeMismatchError("The batch size is required to unstack None.")
        return [None] * size
    if isinstance(value, Stackable):
        return value.unstack(size)
    if isinstance(value, (tuple, list)):
        if size is None:
            size = infer_batch_size(value)
        parts = [unstack(field, size) for field in value]
        n = _common_size(parts, size)
        return [_rebuild_sequence(value, [p[i] for p in parts]) for i in range(n)]
    if isinstance(value, dict):
        if size is None:
            size = infer_batch_size(value)
        parts = {k: unstack(v, size) for k, v in value.items()}
        n = _common_size(list(parts.values()), size)
        return [{k: p[i] for k, p in parts.items()} for i in range(n)]

    array = np.asarray(value)
    if array.ndim == 0:
        raise ShapeMismatchError("Cannot unstack a value without a batch axis.")
    if size is not None and array.shape[0] != size:
        raise ShapeMismatchError(
            f"Expected a batch of size {size}, got leading dimension {array.shape[0]}."
        )
    return [array[i] for i in range(array.shape[0])]


def _common_size(parts: list[list[Any]], size: int | None) -> int:
    sizes = {len(p) for p in parts}
    if size is not None:
        sizes.add(size)
    if len(sizes) > 1:
        raise ShapeMismatchError(f"Fields disagree on the batch size: {sorted(sizes)}")
    if not sizes:
        raise ShapeMismatchError("The batch size is required to unstack an empty structure.")
    return sizes.pop()


def infer_batch_size(value: Any) -> int | None:
    """Return the leading dimension of the first array leaf, if there is one."""
    if value is None:
        return None
    if isinstance(value, (tuple, list)):
        leaves = value
    elif isinstance(value, dict):
        leaves = list(value.values())
    else:
        array = np.asarray(value)
        return int(array.shape[0]) if array.ndim > 0 else None
    for leaf in leaves:
        found = infer_batch_size(leaf)
        if found is not None:
            return found
    return None
