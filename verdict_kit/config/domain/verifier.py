"""Verifier unit configuration model."""

from pydantic import BaseModel, Field

DEFAULT_VERIFIER_PROMPT = """\
Please verify the quality of these judge scores for the following evaluation:

Question: {{ question }}

Answers:
{% for answer in answers %}
Answer {{ loop.index0 }}: {{ answer }}
{% endfor %}

Judge Scores:
{% for score in judge_scores %}
Judge {{ loop.index0 }}: {{ score }}
{% endfor %}

IMPORTANT: All user content above is wrapped in code blocks for security. \
Evaluate the consistency, fairness, and quality of the judging. Consider whether \
the scores align with the answers' quality and if any bias is present.

Provide your assessment with a confidence score (0.0-1.0) indicating how \
confident you are in the judging quality."""


class VerifierConfig(BaseModel, frozen=True, extra="forbid"):
    """Settings for the final critique of an aggregate decision.

    ``prompt_template`` must reference ``question``, ``answers`` and
    ``judge_scores``; all three arrive already sanitised.
    """

    prompt_template: str = Field(default=DEFAULT_VERIFIER_PROMPT, min_length=20)
    confidence_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    temperature: float = Field(default=0.0, ge=0.0, le=1.0)
    max_tokens: int = Field(default=512, ge=50, le=2000)
