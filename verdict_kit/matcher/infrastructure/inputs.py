"""State reading and input bounds shared by the deterministic matchers."""

from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.limits import (
    MAX_ANSWERS,
    MAX_CONTENT_BYTES,
    content_size,
)
from verdict_kit.evaluation.domain.state import ANSWERS, REFERENCE_ANSWER, State
from verdict_kit.unit.infrastructure.errors import InputSizeError, MissingInputError


def read_match_inputs(unit: str, state: State) -> tuple[str, tuple[Answer, ...]]:
    """Return (reference, answers) from state after checking presence and size.

    Raises:
        MissingInputError: if answers or the reference answer is absent or empty.
        InputSizeError: if there are more than MAX_ANSWERS answers or any
            string exceeds MAX_CONTENT_BYTES.
    """
    answers = state.get(ANSWERS)
    if not answers:
        raise MissingInputError(unit=unit, key=ANSWERS.name)
    if len(answers) > MAX_ANSWERS:
        raise InputSizeError(
            unit=unit,
            reason=f"too many answers: {len(answers)} exceeds limit of {MAX_ANSWERS}",
        )

    reference = state.get(REFERENCE_ANSWER)
    if not reference:
        raise MissingInputError(unit=unit, key=REFERENCE_ANSWER.name)
    if content_size(reference) > MAX_CONTENT_BYTES:
        raise InputSizeError(
            unit=unit,
            reason=(
                f"reference answer too long: {content_size(reference)} bytes "
                f"exceeds limit of {MAX_CONTENT_BYTES}"
            ),
        )

    for index, answer in enumerate(answers):
        size = content_size(answer.content)
        if size > MAX_CONTENT_BYTES:
            raise InputSizeError(
                unit=unit,
                reason=(
                    f"answer {index} too long: {size} bytes exceeds limit "
                    f"of {MAX_CONTENT_BYTES}"
                ),
            )
    return reference, answers
