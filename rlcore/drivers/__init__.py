"""Rollout drivers."""

from rlcore.drivers.step_based import Listener, RunResult, StepBasedDriver

__all__ = ["Listener", "RunResult", "StepBasedDriver"]
