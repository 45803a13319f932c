"""ExactMatchUnit — scores answers 1.0 or 0.0 by normalised equality with the reference."""

import time
from collections.abc import Mapping
from typing import Self

from verdict_kit.config.domain.matcher import ExactMatchConfig
from verdict_kit.config.infrastructure.map_loader import (
    load_unit_config,
    validate_unit_config,
)
from verdict_kit.evaluation.domain.judge_summary import JudgeSummary
from verdict_kit.evaluation.domain.state import JUDGE_SCORES, State
from verdict_kit.matcher.domain.normalize import fold_case, trim
from verdict_kit.matcher.infrastructure.inputs import read_match_inputs
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.infrastructure.lifecycle import (
    observed_execution,
    require_unit_name,
)
from verdict_kit.unit.infrastructure.tracing import unit_span

UNIT_TYPE = "exact_match"

MATCH_REASONING = "Exact match found"
NO_MATCH_REASONING = "No exact match"


class ExactMatchUnit:
    """Deterministic matcher: 1.0 on equality after trimming and case folding.

    Satisfies the Unit protocol structurally. Holds no per-call state, so one
    instance can serve concurrent executions.
    """

    def __init__(
        self, name: str, config: ExactMatchConfig, observer: UnitObserver
    ) -> None:
        self._name = require_unit_name(name)
        self._config = validate_unit_config(ExactMatchConfig, config)
        self._observer = observer

    @classmethod
    def from_mapping(
        cls, name: str, params: Mapping[str, object], observer: UnitObserver
    ) -> Self:
        return cls(
            name=name,
            config=load_unit_config(ExactMatchConfig, params),
            observer=observer,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> ExactMatchConfig:
        return self._config

    def validate(self) -> None:
        validate_unit_config(ExactMatchConfig, self._config)

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        config = load_unit_config(ExactMatchConfig, params, base=self._config)
        return type(self)(name=self._name, config=config, observer=self._observer)

    def normalize(self, text: str) -> str:
        """Trim first, then case-fold, according to config."""
        if self._config.trim_whitespace:
            text = trim(text)
        if not self._config.case_sensitive:
            text = fold_case(text)
        return text

    async def execute(self, state: State) -> State:
        """Score every answer against the reference answer.

        Raises:
            MissingInputError: if answers or reference_answer are absent.
            InputSizeError: if the inputs exceed the size limits.
        """
        attributes = {
            "config.case_sensitive": self._config.case_sensitive,
            "config.trim_whitespace": self._config.trim_whitespace,
        }
        with (
            observed_execution(self._observer, self._name, UNIT_TYPE),
            unit_span("ExactMatchUnit.execute", UNIT_TYPE, self._name, attributes) as span,
        ):
            start = time.monotonic()
            reference, answers = read_match_inputs(unit=self._name, state=state)
            expected = self.normalize(reference)

            summaries = []
            for answer in answers:
                matched = self.normalize(answer.content) == expected
                summaries.append(
                    JudgeSummary(
                        score=1.0 if matched else 0.0,
                        reasoning=MATCH_REASONING if matched else NO_MATCH_REASONING,
                        confidence=1.0,
                    )
                )

            span.set_attribute(
                "eval.score", sum(s.score for s in summaries) / len(summaries)
            )
            span.set_attribute("eval.latency_ms", int((time.monotonic() - start) * 1000))
            span.set_attribute("eval.answers_count", len(answers))
            span.set_attribute("no_llm_cost", True)
            return state.with_(JUDGE_SCORES, tuple(summaries))
