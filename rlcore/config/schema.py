"""Configuration schema for rollouts: single source of truth.

Pydantic models describing how a rollout is driven: driver budgets and
batching, environment wrappers and metric buffers.  Code-level
constructors accept the same values directly; these models add
validation for values coming from files or other services.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, model_validator


# ---------------------------------------------------------------------------
# Section 1: Driver
# ---------------------------------------------------------------------------

class DriverConfig(BaseModel):
    """Budgets, batch size and root seed of a StepBasedDriver."""

    max_steps: int | None = Field(
        default=None, ge=1,
        description="Stop after this many non-boundary steps. None = unbounded.",
    )
    max_episodes: int | None = Field(
        default=None, ge=1,
        description="Stop after this many completed episodes. None = unbounded.",
    )
    batch_size: int = Field(
        default=1, ge=1,
        description="Number of environment instances stepped per iteration.",
    )
    seed: int | None = Field(
        default=None, ge=0,
        description="Root seed; copies are reseeded with seeds derived from it.",
    )


# ---------------------------------------------------------------------------
# Section 2: Environment wrappers
# ---------------------------------------------------------------------------

class WrapperConfig(BaseModel):
    """Which wrappers to put around each environment instance."""

    time_limit: int | None = Field(
        default=None, ge=1,
        description="Force episode end after this many steps. None = no limit.",
    )
    action_repeat: int | None = Field(
        default=None, ge=2,
        description="Repeat every action this many times. None = no repetition.",
    )
    run_statistics: bool = Field(
        default=False,
        description="Track reset / episode / step counters.",
    )


# ---------------------------------------------------------------------------
# Section 3: Metrics
# ---------------------------------------------------------------------------

class MetricsConfig(BaseModel):
    """Episode metric listeners."""

    buffer_size: int = Field(
        default=10, ge=1,
        description="Number of most recent episodes averaged by episode metrics.",
    )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

class RolloutConfig(BaseModel):
    """Complete configuration of one rollout."""

    driver: DriverConfig = DriverConfig()
    wrappers: WrapperConfig = WrapperConfig()
    metrics: MetricsConfig = MetricsConfig()
    require_termination: bool = Field(
        default=True,
        description="Reject configurations whose driver would run without a budget.",
    )

    @model_validator(mode="after")
    def driver_has_budget(self) -> RolloutConfig:
        if (
            self.require_termination
            and self.driver.max_steps is None
            and self.driver.max_episodes is None
        ):
            raise ValueError(
                "The driver needs 'max_steps' or 'max_episodes' "
                "(or set require_termination=False)."
            )
        return self
