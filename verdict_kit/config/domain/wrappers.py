"""Configuration models for units that wrap another unit."""

from pydantic import BaseModel, Field

from verdict_kit.config.domain.pipeline import UnitSpec


class BudgetLimits(BaseModel, frozen=True, extra="forbid"):
    """Per-run usage ceilings; zero means unlimited."""

    max_tokens: int = Field(default=0, ge=0)
    max_calls: int = Field(default=0, ge=0)


class WrappedUnitParams(BaseModel, frozen=True):
    """The ``wrapped_unit`` entry every wrapper type requires in its params."""

    wrapped_unit: UnitSpec
