"""Exception taxonomy for the interaction core.

Every error here marks a programming mistake (a violated precondition),
not a recoverable runtime condition.  Nothing in the library catches,
retries or coerces them.
"""

from __future__ import annotations


class RLCoreError(Exception):
    """Base class for all library errors."""


class PreconditionError(RLCoreError, ValueError):
    """An argument or call sequence violates a documented precondition."""


class InvalidActionError(PreconditionError):
    """An action outside the environment's action space was submitted."""


class ShapeMismatchError(PreconditionError):
    """Values that must share a (non-batch) shape or batch size do not."""
