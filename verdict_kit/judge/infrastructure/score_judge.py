"""ScoreJudgeUnit — scores each answer with a model call and a structured JSON reply."""

import math
from collections.abc import Awaitable, Callable, Mapping
from typing import Self

from pydantic import ValidationError

from verdict_kit.config.domain.score_judge import ScoreJudgeConfig
from verdict_kit.config.infrastructure.map_loader import (
    load_unit_config,
    validate_unit_config,
)
from verdict_kit.evaluation.domain.judge_summary import JudgeSummary
from verdict_kit.evaluation.domain.limits import (
    MAX_ANSWERS,
    MAX_CONTENT_BYTES,
    content_size,
)
from verdict_kit.evaluation.domain.state import ANSWERS, JUDGE_SCORES, QUESTION, State
from verdict_kit.judge.domain.response import JUDGE_RESPONSE_INSTRUCTION, JudgeResponse
from verdict_kit.judge.domain.score_scale import ScoreScale
from verdict_kit.llm.domain.client import JSON_OBJECT_FORMAT, CompletionOptions, LLMClient
from verdict_kit.llm.domain.tokens import supports_json_mode
from verdict_kit.prompt.domain.json_extract import extract_json
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.infrastructure.errors import (
    ConfidenceBelowMinimumError,
    InputSizeError,
    InvalidScoreError,
    MissingInputError,
    ModelCallError,
    ResponseParseError,
)
from verdict_kit.unit.infrastructure.fanout import gather_bounded
from verdict_kit.unit.infrastructure.lifecycle import (
    observed_execution,
    require_unit_name,
)
from verdict_kit.unit.infrastructure.prompts import (
    compile_unit_template,
    render_unit_template,
)

UNIT_TYPE = "score_judge"

_REQUIRED_VARIABLES = ("question", "answer")


class ScoreJudgeUnit:
    """Scores every answer in state with one model call per answer.

    Calls run in parallel, at most max_concurrency at a time; the first
    failing answer fails the whole batch. Satisfies the Unit protocol
    structurally.
    """

    def __init__(
        self,
        name: str,
        llm_client: LLMClient,
        config: ScoreJudgeConfig,
        observer: UnitObserver,
    ) -> None:
        self._name = require_unit_name(name)
        self._config = validate_unit_config(ScoreJudgeConfig, config)
        self._scale: ScoreScale = self._config.scale
        self._llm_client = llm_client
        self._observer = observer
        self._template = compile_unit_template(
            unit=self._name,
            field="judge_prompt",
            source=self._config.judge_prompt,
            required=_REQUIRED_VARIABLES,
        )

    @classmethod
    def from_mapping(
        cls,
        name: str,
        params: Mapping[str, object],
        llm_client: LLMClient,
        observer: UnitObserver,
    ) -> Self:
        return cls(
            name=name,
            llm_client=llm_client,
            config=load_unit_config(ScoreJudgeConfig, params),
            observer=observer,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> ScoreJudgeConfig:
        return self._config

    @property
    def scale(self) -> ScoreScale:
        return self._scale

    def validate(self) -> None:
        validate_unit_config(ScoreJudgeConfig, self._config)
        compile_unit_template(
            unit=self._name,
            field="judge_prompt",
            source=self._config.judge_prompt,
            required=_REQUIRED_VARIABLES,
        )

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        config = load_unit_config(ScoreJudgeConfig, params, base=self._config)
        return type(self)(
            name=self._name,
            llm_client=self._llm_client,
            config=config,
            observer=self._observer,
        )

    async def execute(self, state: State) -> State:
        """Score each answer and write ``judge_scores`` in answer order.

        Raises:
            MissingInputError: if question or answers are absent or empty.
            InputSizeError: if the inputs exceed the size limits.
            TemplateExecutionError: if the prompt fails to render.
            ModelCallError: if a model call fails.
            ResponseParseError: if a reply holds no valid JSON object.
            InvalidScoreError: if a score is not finite or is off the scale.
            ConfidenceBelowMinimumError: if a reply is less confident than
                min_confidence.
        """
        with observed_execution(self._observer, self._name, UNIT_TYPE):
            question = state.get(QUESTION)
            if not question:
                raise MissingInputError(unit=self._name, key=QUESTION.name)
            answers = state.get(ANSWERS)
            if not answers:
                raise MissingInputError(unit=self._name, key=ANSWERS.name)
            if len(answers) > MAX_ANSWERS:
                raise InputSizeError(
                    unit=self._name,
                    reason=f"too many answers: {len(answers)} exceeds limit of {MAX_ANSWERS}",
                )
            if any(content_size(a.content) > MAX_CONTENT_BYTES for a in answers):
                raise InputSizeError(
                    unit=self._name,
                    reason=f"answer content exceeds limit of {MAX_CONTENT_BYTES} bytes",
                )

            options: CompletionOptions = {
                "temperature": self._config.temperature,
                "max_tokens": self._config.max_tokens,
            }
            if supports_json_mode(self._llm_client.get_model()):
                options["response_format"] = JSON_OBJECT_FORMAT

            calls = [
                self._make_call(
                    question=question, answer=answer.content, options=options, index=index
                )
                for index, answer in enumerate(answers)
            ]
            summaries = await gather_bounded(calls, limit=self._config.max_concurrency)
            return state.with_(JUDGE_SCORES, tuple(summaries))

    def parse_response(self, response: str, index: int) -> JudgeSummary:
        """Turn one model reply into a validated JudgeSummary.

        index is the 0-based answer position, used only in error messages.
        """
        label = f"answer {index + 1}"
        payload = extract_json(response)
        if not payload:
            raise ResponseParseError(
                unit=self._name,
                reason=(
                    f"{label}: no valid JSON found in model response "
                    f"(response length: {len(response)} chars)"
                ),
            )
        try:
            parsed = JudgeResponse.model_validate_json(payload)
        except ValidationError as exc:
            raise ResponseParseError(
                unit=self._name, reason=f"{label}: invalid response structure: {exc}"
            ) from exc

        if not math.isfinite(parsed.score):
            raise InvalidScoreError(
                unit=self._name, reason=f"{label}: score is not finite: {parsed.score}"
            )
        if not self._scale.contains(parsed.score):
            raise InvalidScoreError(
                unit=self._name,
                reason=(
                    f"{label}: score {parsed.score:g} outside scale "
                    f"{self._config.score_scale}"
                ),
            )
        if parsed.confidence < self._config.min_confidence:
            raise ConfidenceBelowMinimumError(
                unit=self._name,
                confidence=parsed.confidence,
                minimum=self._config.min_confidence,
            )
        return JudgeSummary(
            score=parsed.score,
            reasoning=parsed.reasoning,
            confidence=parsed.confidence,
        )

    def _make_call(
        self, question: str, answer: str, options: CompletionOptions, index: int
    ) -> Callable[[], Awaitable[JudgeSummary]]:
        async def call() -> JudgeSummary:
            prompt = render_unit_template(
                unit=self._name,
                template=self._template,
                data={"question": question, "answer": answer},
            )
            prompt += JUDGE_RESPONSE_INSTRUCTION
            try:
                response = await self._llm_client.complete(prompt=prompt, options=options)
            except Exception as exc:
                raise ModelCallError(
                    unit=self._name,
                    reason=f"answer {index + 1}: {exc}",
                    retriable=getattr(exc, "retriable", False),
                ) from exc
            return self.parse_response(response, index)

        return call
