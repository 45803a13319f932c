"""PoolAggregatorUnit — reduces judge scores to a Verdict with a single winner."""

import math
from collections.abc import Mapping, Sequence
from typing import Self

from verdict_kit.aggregator.domain.reducers import (
    MaxReducer,
    MeanReducer,
    MedianReducer,
    ScoreReducer,
)
from verdict_kit.aggregator.domain.tie_breaker import TieDetected, break_tie
from verdict_kit.config.domain.aggregator import AggregatorConfig
from verdict_kit.config.infrastructure.map_loader import (
    load_unit_config,
    validate_unit_config,
)
from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.state import ANSWERS, JUDGE_SCORES, VERDICT, State
from verdict_kit.evaluation.domain.verdict import Verdict
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.infrastructure.errors import (
    BelowMinScoreError,
    InvalidScoreError,
    MissingInputError,
    NoScoresError,
    ScoreMismatchError,
    TieError,
)
from verdict_kit.unit.infrastructure.lifecycle import (
    observed_execution,
    require_unit_name,
)


class PoolAggregatorUnit:
    """Aggregator unit parameterised by the statistic it pools scores with.

    Satisfies the Unit protocol structurally. Use the max_pool, mean_pool and
    median_pool constructors rather than picking a reducer by hand.
    """

    def __init__(
        self,
        name: str,
        config: AggregatorConfig,
        observer: UnitObserver,
        reducer: ScoreReducer,
        unit_type: str,
    ) -> None:
        self._name = require_unit_name(name)
        self._config = validate_unit_config(AggregatorConfig, config)
        self._observer = observer
        self._reducer = reducer
        self._unit_type = unit_type

    @classmethod
    def from_mapping(
        cls,
        name: str,
        params: Mapping[str, object],
        observer: UnitObserver,
        reducer: ScoreReducer,
        unit_type: str,
    ) -> Self:
        return cls(
            name=name,
            config=load_unit_config(AggregatorConfig, params),
            observer=observer,
            reducer=reducer,
            unit_type=unit_type,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def unit_type(self) -> str:
        return self._unit_type

    @property
    def config(self) -> AggregatorConfig:
        return self._config

    def validate(self) -> None:
        validate_unit_config(AggregatorConfig, self._config)

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        config = load_unit_config(AggregatorConfig, params, base=self._config)
        return type(self)(
            name=self._name,
            config=config,
            observer=self._observer,
            reducer=self._reducer,
            unit_type=self._unit_type,
        )

    def aggregate(
        self, scores: Sequence[float], candidates: Sequence[Answer]
    ) -> tuple[Answer, float]:
        """Return (winner, aggregate score) for equal-length scores and candidates.

        Raises:
            ScoreMismatchError: if the two sequences differ in length.
            NoScoresError: if they are empty.
            InvalidScoreError: if any score is NaN or infinite.
            BelowMinScoreError: if the aggregate is below min_score.
            TieError: if candidates tie and tie_breaker is "error".
        """
        if len(scores) != len(candidates):
            raise ScoreMismatchError(
                unit=self._name, answers=len(candidates), scores=len(scores)
            )
        if not scores:
            raise NoScoresError(unit=self._name)
        for index, score in enumerate(scores):
            if not math.isfinite(score):
                raise InvalidScoreError(
                    unit=self._name, reason=f"invalid score at index {index}: {score}"
                )

        reduction = self._reducer.reduce(scores)
        if not math.isfinite(reduction.aggregate):
            raise InvalidScoreError(
                unit=self._name,
                reason=f"{reduction.statistic} is not finite: {reduction.aggregate}",
            )
        if reduction.aggregate < self._config.min_score:
            raise BelowMinScoreError(
                unit=self._name,
                statistic=reduction.statistic,
                value=reduction.aggregate,
                minimum=self._config.min_score,
            )

        try:
            winner = break_tie(
                reduction.candidates,
                policy=self._config.tie_breaker,
                secure=self._reducer.secure_random,
            )
        except TieDetected as exc:
            raise TieError(unit=self._name, detail=reduction.tie_detail) from exc
        return candidates[winner], reduction.aggregate

    async def execute(self, state: State) -> State:
        """Aggregate judge_scores over answers and write the verdict.

        When counts differ and require_all_scores is false, only the first
        min(len(answers), len(judge_scores)) pairs are pooled.

        Raises:
            MissingInputError: if answers or judge_scores are absent or empty.
            ScoreMismatchError: if counts differ and require_all_scores is set.
            And anything aggregate() raises.
        """
        with observed_execution(self._observer, self._name, self._unit_type):
            answers = state.get(ANSWERS)
            if not answers:
                raise MissingInputError(unit=self._name, key=ANSWERS.name)
            judge_scores = state.get(JUDGE_SCORES)
            if not judge_scores:
                raise MissingInputError(unit=self._name, key=JUDGE_SCORES.name)

            if len(answers) != len(judge_scores):
                if self._config.require_all_scores:
                    raise ScoreMismatchError(
                        unit=self._name, answers=len(answers), scores=len(judge_scores)
                    )
                count = min(len(answers), len(judge_scores))
                answers = answers[:count]
                judge_scores = judge_scores[:count]

            winner, aggregate_score = self.aggregate(
                [summary.score for summary in judge_scores], answers
            )
            verdict = Verdict(
                id=f"{self._name}_verdict",
                winner_answer=winner,
                aggregate_score=aggregate_score,
            )
            return state.with_(VERDICT, verdict)


def max_pool(
    name: str, config: AggregatorConfig, observer: UnitObserver
) -> PoolAggregatorUnit:
    return PoolAggregatorUnit(
        name=name,
        config=config,
        observer=observer,
        reducer=MaxReducer(),
        unit_type="max_pool",
    )


def mean_pool(
    name: str, config: AggregatorConfig, observer: UnitObserver
) -> PoolAggregatorUnit:
    return PoolAggregatorUnit(
        name=name,
        config=config,
        observer=observer,
        reducer=MeanReducer(),
        unit_type="mean_pool",
    )


def median_pool(
    name: str, config: AggregatorConfig, observer: UnitObserver
) -> PoolAggregatorUnit:
    return PoolAggregatorUnit(
        name=name,
        config=config,
        observer=observer,
        reducer=MedianReducer(),
        unit_type="median_pool",
    )
