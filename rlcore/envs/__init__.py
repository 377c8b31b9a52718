"""Environment wrappers and adapters.

``GymnasiumEnvironment`` is resolved lazily so the core can be used
without gymnasium installed.
"""

from __future__ import annotations

from rlcore.envs.vector import VectorEnvironment
from rlcore.envs.wrappers import ActionRepeat, RunStatistics, TimeLimit, Wrapper, wrap_environment


def __getattr__(name: str):
    if name == "GymnasiumEnvironment":
        from rlcore.envs.gymnasium_env import GymnasiumEnvironment
        return GymnasiumEnvironment
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "ActionRepeat",
    "GymnasiumEnvironment",
    "RunStatistics",
    "TimeLimit",
    "VectorEnvironment",
    "Wrapper",
    "wrap_environment",
]
