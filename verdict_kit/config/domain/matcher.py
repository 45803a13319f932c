"""Exact and fuzzy matcher configuration models."""

from typing import Literal

from pydantic import BaseModel, Field


class ExactMatchConfig(BaseModel, frozen=True, extra="forbid"):
    case_sensitive: bool = False
    trim_whitespace: bool = True


class FuzzyMatchConfig(BaseModel, frozen=True, extra="forbid"):
    """Levenshtein matching; similarities under threshold score 0.0."""

    algorithm: Literal["levenshtein"] = "levenshtein"
    threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    case_sensitive: bool = False
