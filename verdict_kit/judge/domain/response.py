"""Shape of the JSON object a scoring model must answer with."""

from pydantic import BaseModel, Field

JUDGE_RESPONSE_INSTRUCTION = (
    "\n\nIMPORTANT: You must respond with valid JSON in exactly this format:\n"
    '{"score": <number>, "confidence": <0.0-1.0>, '
    '"reasoning": "<detailed explanation>", "version": 1}'
)


class JudgeResponse(BaseModel, frozen=True):
    score: float
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = Field(min_length=10)
    version: int | None = None
