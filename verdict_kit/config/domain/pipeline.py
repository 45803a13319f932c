"""PipelineConfig — the root object of a pipeline YAML file."""

from typing import Any

from pydantic import BaseModel, Field

type UnitParams = dict[str, Any]


class LLMSettings(BaseModel, frozen=True):
    model: str = Field(min_length=1)
    timeout_seconds: float | None = Field(default=None, gt=0.0)


class UnitSpec(BaseModel, frozen=True):
    """One unit declaration: its id, registry type and untyped parameters."""

    id: str = Field(min_length=1)
    type: str = Field(min_length=1)
    params: UnitParams = Field(default_factory=dict)


class PipelineConfig(BaseModel, frozen=True):
    """Root configuration aggregate for a linear evaluation pipeline."""

    name: str = Field(min_length=1)
    llm: LLMSettings | None = None
    units: list[UnitSpec] = Field(min_length=1)
