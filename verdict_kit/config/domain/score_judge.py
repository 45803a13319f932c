"""Score-Judge unit configuration model."""

from pydantic import BaseModel, Field, field_validator

from verdict_kit.judge.domain.score_scale import ScoreScale, parse_score_scale

DEFAULT_JUDGE_PROMPT = (
    "Please score the following answer to the question on a scale from 1 to 10:\n"
    "\n"
    "Question: {{ question }}\n"
    "Answer: {{ answer }}\n"
    "\n"
    "Consider accuracy, completeness, and clarity in your scoring."
)


class ScoreJudgeConfig(BaseModel, frozen=True, extra="forbid"):
    """Per-answer LLM scoring settings.

    ``judge_prompt`` must reference ``question`` and ``answer``.
    """

    judge_prompt: str = Field(default=DEFAULT_JUDGE_PROMPT, min_length=20)
    score_scale: str = Field(default="1-10", min_length=3)
    temperature: float = Field(default=0.0, ge=0.0, le=1.0)
    max_tokens: int = Field(default=256, ge=50, le=2000)
    min_confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    max_concurrency: int = Field(default=5, ge=1, le=20)

    @field_validator("score_scale")
    @classmethod
    def _score_scale_parses(cls, value: str) -> str:
        parse_score_scale(value)
        return value

    @property
    def scale(self) -> ScoreScale:
        return parse_score_scale(self.score_scale)
