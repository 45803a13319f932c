"""VerifierUnit — a final model critique that can flag a verdict for human review."""

import time
from collections.abc import Mapping
from typing import Self

from pydantic import ValidationError

from verdict_kit.config.domain.verifier import VerifierConfig
from verdict_kit.config.infrastructure.map_loader import (
    load_unit_config,
    validate_unit_config,
)
from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.judge_summary import JudgeSummary
from verdict_kit.evaluation.domain.state import (
    ANSWERS,
    BUDGET,
    JUDGE_SCORES,
    QUESTION,
    TRACE_LEVEL,
    VERDICT,
    VERIFICATION_TRACE,
    State,
)
from verdict_kit.llm.domain.client import (
    JSON_OBJECT_FORMAT,
    Completion,
    CompletionOptions,
    LLMClient,
)
from verdict_kit.llm.domain.tokens import (
    context_limit_for_model,
    estimate_tokens,
    supports_json_mode,
)
from verdict_kit.llm.infrastructure.retry import RetryPolicy, call_with_retry
from verdict_kit.prompt.domain.json_extract import extract_json
from verdict_kit.prompt.domain.sanitize import sanitize_user_content
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.infrastructure.errors import (
    ContextLimitExceededError,
    MissingInputError,
    ModelCallError,
    ResponseParseError,
)
from verdict_kit.unit.infrastructure.lifecycle import (
    observed_execution,
    require_unit_name,
)
from verdict_kit.unit.infrastructure.prompts import (
    compile_unit_template,
    render_unit_template,
)
from verdict_kit.unit.infrastructure.tracing import unit_span
from verdict_kit.verifier.domain.context_budget import (
    available_answer_tokens,
    fit_answers,
    judge_score_text,
)
from verdict_kit.verifier.domain.response import (
    VERIFICATION_RESPONSE_INSTRUCTION,
    VerificationResponse,
    VerificationTrace,
)

UNIT_TYPE = "verification"

DEBUG_TRACE_LEVEL = "debug"

_REQUIRED_VARIABLES = ("question", "answers", "judge_scores")


class VerifierUnit:
    """Asks a model how much it trusts the judging behind the current verdict.

    A reported confidence below confidence_threshold marks the verdict as
    requiring human review. Question, answers and judge reasoning are fenced
    by sanitize_user_content before they reach the template, so a template
    never sees raw user text. Transient model failures are retried according
    to the retry policy. Satisfies the Unit protocol structurally.
    """

    def __init__(
        self,
        name: str,
        llm_client: LLMClient,
        config: VerifierConfig,
        observer: UnitObserver,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._name = require_unit_name(name)
        self._config = validate_unit_config(VerifierConfig, config)
        self._llm_client = llm_client
        self._observer = observer
        self._retry_policy = retry_policy or RetryPolicy()
        self._template = compile_unit_template(
            unit=self._name,
            field="prompt_template",
            source=self._config.prompt_template,
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
            config=load_unit_config(VerifierConfig, params),
            observer=observer,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> VerifierConfig:
        return self._config

    def validate(self) -> None:
        validate_unit_config(VerifierConfig, self._config)
        compile_unit_template(
            unit=self._name,
            field="prompt_template",
            source=self._config.prompt_template,
            required=_REQUIRED_VARIABLES,
        )

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        config = load_unit_config(VerifierConfig, params, base=self._config)
        return type(self)(
            name=self._name,
            llm_client=self._llm_client,
            config=config,
            observer=self._observer,
            retry_policy=self._retry_policy,
        )

    def build_prompt(
        self,
        question: str,
        answers: tuple[Answer, ...],
        judge_scores: tuple[JudgeSummary, ...],
    ) -> str:
        """Render the verification prompt from sanitised inputs."""
        data = {
            "question": sanitize_user_content(question),
            "answers": [sanitize_user_content(a.content) for a in answers],
            "judge_scores": [
                sanitize_user_content(judge_score_text(s)) for s in judge_scores
            ],
        }
        prompt = render_unit_template(unit=self._name, template=self._template, data=data)
        return prompt + VERIFICATION_RESPONSE_INSTRUCTION

    def parse_response(self, response: str) -> VerificationResponse:
        payload = extract_json(response)
        if not payload:
            raise ResponseParseError(
                unit=self._name,
                reason=f"no valid JSON found in model response (len: {len(response)})",
            )
        try:
            return VerificationResponse.model_validate_json(payload)
        except ValidationError as exc:
            raise ResponseParseError(
                unit=self._name, reason=f"invalid response structure: {exc}"
            ) from exc

    async def execute(self, state: State) -> State:
        """Verify the verdict and write the outcome back to state.

        Writes the verdict (flagged when confidence is below threshold),
        ``verification_trace`` when trace_level is "debug", and the updated
        ``budget`` when a budget is present.

        Raises:
            MissingInputError: if question, answers, judge_scores or verdict
                is absent or empty.
            TemplateExecutionError: if the prompt fails to render.
            ContextLimitExceededError: if the prompt exceeds the model's cap.
            ModelCallError: if the model call still fails after retries.
            ResponseParseError: if the reply is not a valid verification.
        """
        model = self._llm_client.get_model()
        attributes = {
            "config.confidence_threshold": self._config.confidence_threshold,
            "config.temperature": self._config.temperature,
            "llm.model": model,
        }
        with (
            observed_execution(self._observer, self._name, UNIT_TYPE),
            unit_span("VerifierUnit.execute", UNIT_TYPE, self._name, attributes) as span,
        ):
            start = time.monotonic()
            question = state.get(QUESTION)
            if not question:
                raise MissingInputError(unit=self._name, key=QUESTION.name)
            answers = state.get(ANSWERS)
            if not answers:
                raise MissingInputError(unit=self._name, key=ANSWERS.name)
            judge_scores = state.get(JUDGE_SCORES)
            if not judge_scores:
                raise MissingInputError(unit=self._name, key=JUDGE_SCORES.name)
            verdict = state.get(VERDICT)
            if verdict is None:
                raise MissingInputError(unit=self._name, key=VERDICT.name)

            context_limit = context_limit_for_model(model)
            fitted = fit_answers(
                answers=answers,
                question=question,
                judge_scores=judge_scores,
                max_prompt_tokens=context_limit,
            )
            if fitted != answers:
                self._observer.answers_truncated(
                    unit=self._name,
                    answers_count=len(fitted),
                    available_tokens=available_answer_tokens(
                        question, judge_scores, context_limit
                    ),
                )

            prompt = self.build_prompt(question, fitted, judge_scores)
            prompt_tokens = estimate_tokens(prompt)
            if prompt_tokens > context_limit:
                raise ContextLimitExceededError(
                    unit=self._name, prompt_tokens=prompt_tokens, limit=context_limit
                )

            completion = await self._complete(prompt=prompt, model=model)
            result = self.parse_response(completion.text)

            new_state = state
            if result.confidence < self._config.confidence_threshold:
                self._observer.review_flagged(
                    unit=self._name,
                    confidence=result.confidence,
                    threshold=self._config.confidence_threshold,
                )
                new_state = new_state.with_(
                    VERDICT, verdict.model_copy(update={"requires_human_review": True})
                )

            trace_level = state.get(TRACE_LEVEL) or ""
            if trace_level.lower() == DEBUG_TRACE_LEVEL:
                trace = VerificationTrace.from_response(result)
                new_state = new_state.with_(VERIFICATION_TRACE, trace.model_dump_json())

            budget = state.get(BUDGET)
            if budget is not None:
                new_state = new_state.with_(
                    BUDGET,
                    budget.record_call(
                        tokens_in=completion.tokens_in, tokens_out=completion.tokens_out
                    ),
                )

            span.set_attribute("eval.score", result.confidence)
            span.set_attribute("eval.answers_count", len(answers))
            span.set_attribute("eval.tokens_in", completion.tokens_in)
            span.set_attribute("eval.tokens_out", completion.tokens_out)
            span.set_attribute("eval.latency_ms", int((time.monotonic() - start) * 1000))
            span.set_attribute("no_llm_cost", False)
            return new_state

    async def _complete(self, prompt: str, model: str) -> Completion:
        options: CompletionOptions = {
            "temperature": self._config.temperature,
            "max_tokens": self._config.max_tokens,
        }
        if supports_json_mode(model):
            options["response_format"] = JSON_OBJECT_FORMAT

        attempts = 0

        async def call() -> Completion:
            nonlocal attempts
            attempts += 1
            return await self._llm_client.complete_with_usage(
                prompt=prompt, options=options
            )

        def on_retry(attempt: int, delay_seconds: float, exc: BaseException) -> None:
            self._observer.model_call_retried(
                unit=self._name,
                attempt=attempt,
                delay_seconds=delay_seconds,
                reason=str(exc),
            )

        try:
            return await call_with_retry(call, self._retry_policy, on_retry=on_retry)
        except Exception as exc:
            raise ModelCallError(
                unit=self._name,
                reason=f"model call failed after {attempts} attempts: {exc}",
                retriable=getattr(exc, "retriable", False),
            ) from exc
