"""Aggregator configuration model shared by the max, mean and median pools."""

from pydantic import BaseModel, Field

from verdict_kit.aggregator.domain.tie_breaker import TieBreaker


class AggregatorConfig(BaseModel, frozen=True, extra="forbid"):
    tie_breaker: TieBreaker = TieBreaker.FIRST
    min_score: float = Field(default=0.0, ge=0.0, le=1.0)
    require_all_scores: bool = True
