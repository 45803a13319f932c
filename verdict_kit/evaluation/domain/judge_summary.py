"""JudgeSummary value object — one judge's verdict on one candidate."""

import math

from pydantic import BaseModel, Field, field_validator


class JudgeSummary(BaseModel, frozen=True):
    """Score, reasoning and self-reported confidence for a single answer.

    Deterministic matchers always report a confidence of 1.0.
    """

    score: float
    reasoning: str
    confidence: float = Field(ge=0.0, le=1.0)

    @field_validator("score")
    @classmethod
    def _score_is_finite(cls, value: float) -> float:
        if not math.isfinite(value):
            raise ValueError(f"score must be finite, got {value}")
        return value
