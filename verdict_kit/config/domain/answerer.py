"""Answerer unit configuration model."""

from datetime import timedelta

from pydantic import BaseModel, Field, field_validator

from verdict_kit.config.domain.duration import Duration

DEFAULT_ANSWERER_PROMPT = "Please provide a comprehensive answer to: {{ question }}"

MIN_TIMEOUT = timedelta(seconds=1)
MAX_TIMEOUT = timedelta(seconds=300)


class AnswererConfig(BaseModel, frozen=True, extra="forbid"):
    """Generation settings for producing candidate answers.

    ``prompt`` is a template that must reference ``question``.
    """

    num_answers: int = Field(default=3, ge=1, le=10)
    prompt: str = Field(default=DEFAULT_ANSWERER_PROMPT, min_length=10)
    temperature: float = Field(default=0.7, ge=0.0, le=1.0)
    max_tokens: int = Field(default=500, ge=10, le=16000)
    timeout: Duration = Field(default=timedelta(seconds=30))
    max_concurrency: int = Field(default=5, ge=1, le=20)

    @field_validator("timeout")
    @classmethod
    def _timeout_in_range(cls, value: timedelta) -> timedelta:
        if not MIN_TIMEOUT <= value <= MAX_TIMEOUT:
            raise ValueError(
                f"timeout must be between {MIN_TIMEOUT.total_seconds():g}s "
                f"and {MAX_TIMEOUT.total_seconds():g}s, got {value.total_seconds():g}s"
            )
        return value
