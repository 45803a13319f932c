"""FuzzyMatchUnit — scores answers by Levenshtein similarity to the reference."""

import time
from collections.abc import Mapping
from typing import Self

from verdict_kit.config.domain.matcher import FuzzyMatchConfig
from verdict_kit.config.infrastructure.map_loader import (
    load_unit_config,
    validate_unit_config,
)
from verdict_kit.evaluation.domain.judge_summary import JudgeSummary
from verdict_kit.evaluation.domain.state import JUDGE_SCORES, State
from verdict_kit.matcher.domain.normalize import fold_case, levenshtein_similarity
from verdict_kit.matcher.infrastructure.inputs import read_match_inputs
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.infrastructure.lifecycle import (
    observed_execution,
    require_unit_name,
)
from verdict_kit.unit.infrastructure.tracing import unit_span

UNIT_TYPE = "fuzzy_match"


class FuzzyMatchUnit:
    """Deterministic matcher reporting edit-distance similarity.

    Similarities below the configured threshold are reported as 0.0, so every
    score is either 0.0 or in [threshold, 1.0]. Satisfies the Unit protocol
    structurally.
    """

    def __init__(
        self, name: str, config: FuzzyMatchConfig, observer: UnitObserver
    ) -> None:
        self._name = require_unit_name(name)
        self._config = validate_unit_config(FuzzyMatchConfig, config)
        self._observer = observer

    @classmethod
    def from_mapping(
        cls, name: str, params: Mapping[str, object], observer: UnitObserver
    ) -> Self:
        return cls(
            name=name,
            config=load_unit_config(FuzzyMatchConfig, params),
            observer=observer,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> FuzzyMatchConfig:
        return self._config

    def validate(self) -> None:
        validate_unit_config(FuzzyMatchConfig, self._config)

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        config = load_unit_config(FuzzyMatchConfig, params, base=self._config)
        return type(self)(name=self._name, config=config, observer=self._observer)

    def similarity(self, answer: str, reference: str) -> float:
        """Raw similarity in [0, 1] after case folding according to config."""
        if not self._config.case_sensitive:
            answer = fold_case(answer)
            reference = fold_case(reference)
        return levenshtein_similarity(answer, reference)

    def score(self, answer: str, reference: str) -> JudgeSummary:
        threshold = self._config.threshold
        raw = self.similarity(answer, reference)
        if raw < threshold:
            reasoning = (
                f"No match (similarity {raw * 100:.2f}% below "
                f"threshold {threshold * 100:.2f}%)"
            )
            score = 0.0
        else:
            reasoning = f"Fuzzy match similarity: {raw * 100:.2f}%"
            score = raw
        return JudgeSummary(score=score, reasoning=reasoning, confidence=1.0)

    async def execute(self, state: State) -> State:
        """Score every answer against the reference answer.

        Raises:
            MissingInputError: if answers or reference_answer are absent.
            InputSizeError: if the inputs exceed the size limits.
        """
        attributes = {
            "config.algorithm": self._config.algorithm,
            "config.threshold": self._config.threshold,
            "config.case_sensitive": self._config.case_sensitive,
        }
        with (
            observed_execution(self._observer, self._name, UNIT_TYPE),
            unit_span("FuzzyMatchUnit.execute", UNIT_TYPE, self._name, attributes) as span,
        ):
            start = time.monotonic()
            reference, answers = read_match_inputs(unit=self._name, state=state)
            summaries = [self.score(answer.content, reference) for answer in answers]

            span.set_attribute(
                "eval.score", sum(s.score for s in summaries) / len(summaries)
            )
            span.set_attribute("eval.latency_ms", int((time.monotonic() - start) * 1000))
            span.set_attribute("eval.answers_count", len(answers))
            span.set_attribute("no_llm_cost", True)
            return state.with_(JUDGE_SCORES, tuple(summaries))
