"""Answer value object — one candidate response being evaluated."""

from pydantic import BaseModel


class Answer(BaseModel, frozen=True):
    """A candidate response identified by a stable per-batch id.

    Producing units synthesize ids as ``<unit-name>_answer_<1-based-index>``.
    """

    id: str
    content: str
