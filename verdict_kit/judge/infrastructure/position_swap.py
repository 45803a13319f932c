"""PositionSwapUnit — cancels positional bias by judging answers in both orders."""

import statistics
from collections.abc import Mapping, Sequence
from typing import Self

from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.judge_summary import JudgeSummary
from verdict_kit.evaluation.domain.state import ANSWERS, JUDGE_SCORES, State
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.domain.unit import Unit
from verdict_kit.unit.infrastructure.errors import MissingInputError, ScoreMismatchError
from verdict_kit.unit.infrastructure.lifecycle import (
    observed_execution,
    require_unit_name,
)
from verdict_kit.unit.infrastructure.tracing import unit_span

UNIT_TYPE = "position_swap_wrapper"


class PositionSwapUnit:
    """Runs a judge unit twice, once with the answers reversed, and averages.

    Both runs' scores are mapped back to the original answer order and each
    answer gets the mean of its two scores and of its two confidences. A single
    answer has no position to swap, so it goes straight to the wrapped unit.
    The returned State is built on the second run, so usage either run records
    in ``budget`` is kept. Satisfies the Unit protocol structurally.
    """

    def __init__(self, name: str, wrapped: Unit, observer: UnitObserver) -> None:
        self._name = require_unit_name(name)
        self._wrapped = wrapped
        self._observer = observer

    @property
    def name(self) -> str:
        return self._name

    @property
    def wrapped(self) -> Unit:
        return self._wrapped

    def validate(self) -> None:
        self._wrapped.validate()

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        """Return a wrapper around the wrapped unit reconfigured with params."""
        return type(self)(
            name=self._name,
            wrapped=self._wrapped.reconfigure(params),
            observer=self._observer,
        )

    async def execute(self, state: State) -> State:
        """Judge in original then reversed order and write the combined scores.

        Raises:
            MissingInputError: if answers are absent or empty, or a run wrote
                no judge_scores.
            ScoreMismatchError: if a run scored a different number of answers.
            And anything the wrapped unit raises.
        """
        attributes = {"wrapped_unit.name": self._wrapped.name}
        with (
            observed_execution(self._observer, self._name, UNIT_TYPE),
            unit_span("PositionSwapUnit.execute", UNIT_TYPE, self._name, attributes) as span,
        ):
            answers = state.get(ANSWERS)
            if not answers:
                raise MissingInputError(unit=self._name, key=ANSWERS.name)
            if len(answers) == 1:
                return await self._wrapped.execute(state)

            span.add_event("dual_execution_started", {"answer_count": len(answers)})
            first = await self._wrapped.execute(state)
            reversed_answers = tuple(reversed(answers))
            second = await self._wrapped.execute(first.with_(ANSWERS, reversed_answers))

            combined = self.combine(
                self._scores_of(first, answers),
                self._scores_of(second, reversed_answers)[::-1],
            )
            span.add_event(
                "bias_mitigation_completed", {"combination_method": "arithmetic_mean"}
            )
            return second.with_(ANSWERS, answers).with_(JUDGE_SCORES, combined)

    def _scores_of(
        self, result: State, answers: Sequence[Answer]
    ) -> tuple[JudgeSummary, ...]:
        scores = result.get(JUDGE_SCORES)
        if not scores:
            raise MissingInputError(unit=self._name, key=JUDGE_SCORES.name)
        if len(scores) != len(answers):
            raise ScoreMismatchError(
                unit=self._name, answers=len(answers), scores=len(scores)
            )
        return scores

    @staticmethod
    def combine(
        first: Sequence[JudgeSummary], second: Sequence[JudgeSummary]
    ) -> tuple[JudgeSummary, ...]:
        """Pair summaries by position and average score and confidence."""
        combined = []
        for one, other in zip(first, second, strict=True):
            score = statistics.mean((one.score, other.score))
            combined.append(
                JudgeSummary(
                    score=score,
                    reasoning=(
                        f"Position swap: ({one.score:.3f} + {other.score:.3f}) / 2 "
                        f"= {score:.3f}"
                    ),
                    confidence=statistics.mean((one.confidence, other.confidence)),
                )
            )
        return tuple(combined)
