"""Fitting verification inputs into a model's context budget.

All sizes are estimated with estimate_tokens, i.e. about four characters per
token.
"""

from collections.abc import Sequence

from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.judge_summary import JudgeSummary
from verdict_kit.llm.domain.tokens import CHARS_PER_TOKEN, estimate_tokens

# Tokens reserved for the template text and the JSON instruction.
TEMPLATE_OVERHEAD_TOKENS = 500

TRUNCATION_MARKER = "... [truncated]"


def judge_score_text(summary: JudgeSummary) -> str:
    """The text a judge summary is shown to the verifier as."""
    return (
        f"Score: {summary.score:.2f}, Confidence: {summary.confidence:.2f}\n"
        f"Reasoning: {summary.reasoning}"
    )


def available_answer_tokens(
    question: str, judge_scores: Sequence[JudgeSummary], max_prompt_tokens: int
) -> int:
    """Tokens left for answer content once everything else is accounted for."""
    judge_tokens = sum(
        estimate_tokens(f"Score: {s.score:.2f}, Reasoning: {s.reasoning}")
        for s in judge_scores
    )
    used = estimate_tokens(question) + judge_tokens + TEMPLATE_OVERHEAD_TOKENS
    return max_prompt_tokens - used


def fit_answers(
    answers: Sequence[Answer],
    question: str,
    judge_scores: Sequence[JudgeSummary],
    max_prompt_tokens: int,
) -> tuple[Answer, ...]:
    """Shorten answers so their combined estimate fits the remaining budget.

    Answers that already fit are returned unchanged. Otherwise every answer
    gets an equal share of the budget and those longer than their share are
    cut and marked with TRUNCATION_MARKER; ids and order are kept. When no
    budget remains at all the result is empty.
    """
    available = available_answer_tokens(question, judge_scores, max_prompt_tokens)
    if available <= 0:
        return ()

    if sum(estimate_tokens(a.content) for a in answers) <= available:
        return tuple(answers)

    max_chars = (available // len(answers)) * CHARS_PER_TOKEN
    fitted = []
    for answer in answers:
        if len(answer.content) <= max_chars:
            fitted.append(answer)
        else:
            fitted.append(
                Answer(id=answer.id, content=answer.content[:max_chars] + TRUNCATION_MARKER)
            )
    return tuple(fitted)
