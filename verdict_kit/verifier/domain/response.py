"""Verification reply shape and the trace recorded for debug runs."""

from pydantic import BaseModel, Field

VERIFICATION_RESPONSE_INSTRUCTION = (
    "\n\nIMPORTANT: You must respond with valid JSON in exactly this format:\n"
    '{"confidence": <0.0-1.0>, "reasoning": "<detailed explanation>", '
    '"issues": [<optional list of issues>], '
    '"recommendation": "<optional recommendation>", "version": 1}'
)


class VerificationResponse(BaseModel, frozen=True):
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = Field(min_length=10)
    issues: list[str] = Field(default_factory=list)
    recommendation: str = ""
    version: int | None = None


class VerificationTrace(BaseModel, frozen=True):
    """What a debug run stores under ``verification_trace``, as JSON."""

    confidence: float
    reasoning: str
    issues: list[str]
    recommendation: str

    @classmethod
    def from_response(cls, response: VerificationResponse) -> "VerificationTrace":
        return cls(
            confidence=response.confidence,
            reasoning=response.reasoning,
            issues=response.issues,
            recommendation=response.recommendation,
        )
