"""Verdict value object — the final decision produced by an aggregator."""

from pydantic import BaseModel

from verdict_kit.evaluation.domain.answer import Answer


class Verdict(BaseModel, frozen=True):
    """Winner and aggregate score for one evaluation.

    The id is ``<aggregator-name>_verdict``. Only the Verifier sets
    ``requires_human_review``.
    """

    id: str
    winner_answer: Answer
    aggregate_score: float
    requires_human_review: bool = False
