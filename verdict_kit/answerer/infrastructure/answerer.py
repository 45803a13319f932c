"""AnswererUnit — generates candidate answers with bounded parallel model calls."""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from typing import Self

from verdict_kit.config.domain.answerer import AnswererConfig
from verdict_kit.config.infrastructure.map_loader import (
    load_unit_config,
    validate_unit_config,
)
from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.limits import MAX_CONTENT_BYTES, content_size
from verdict_kit.evaluation.domain.state import ANSWERS, QUESTION, State
from verdict_kit.llm.domain.client import CompletionOptions, LLMClient
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.infrastructure.errors import (
    InputSizeError,
    MissingInputError,
    ModelCallError,
    UnitTimeoutError,
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

UNIT_TYPE = "answerer"

_REQUIRED_VARIABLES = ("question",)


class AnswererUnit:
    """Produces num_answers candidate answers to the question in state.

    The prompt is rendered once and sent num_answers times, with at most
    max_concurrency calls in flight. The whole batch shares one deadline of
    config.timeout. Satisfies the Unit protocol structurally.
    """

    def __init__(
        self,
        name: str,
        llm_client: LLMClient,
        config: AnswererConfig,
        observer: UnitObserver,
    ) -> None:
        self._name = require_unit_name(name)
        self._config = validate_unit_config(AnswererConfig, config)
        self._llm_client = llm_client
        self._observer = observer
        self._template = compile_unit_template(
            unit=self._name,
            field="prompt",
            source=self._config.prompt,
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
            config=load_unit_config(AnswererConfig, params),
            observer=observer,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> AnswererConfig:
        return self._config

    def validate(self) -> None:
        validate_unit_config(AnswererConfig, self._config)
        compile_unit_template(
            unit=self._name,
            field="prompt",
            source=self._config.prompt,
            required=_REQUIRED_VARIABLES,
        )

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        config = load_unit_config(AnswererConfig, params, base=self._config)
        return type(self)(
            name=self._name,
            llm_client=self._llm_client,
            config=config,
            observer=self._observer,
        )

    async def execute(self, state: State) -> State:
        """Generate the answers and write them under ``answers``.

        Cancelling the calling task cancels every in-flight call and nothing
        is written.

        Raises:
            MissingInputError: if question is absent or empty.
            InputSizeError: if question exceeds the content limit.
            TemplateExecutionError: if the prompt fails to render.
            ModelCallError: on the first failed model call.
            UnitTimeoutError: if the batch outlives config.timeout.
        """
        with observed_execution(self._observer, self._name, UNIT_TYPE):
            question = state.get(QUESTION)
            if not question:
                raise MissingInputError(unit=self._name, key=QUESTION.name)
            if content_size(question) > MAX_CONTENT_BYTES:
                raise InputSizeError(
                    unit=self._name,
                    reason=f"question exceeds limit of {MAX_CONTENT_BYTES} bytes",
                )

            prompt = render_unit_template(
                unit=self._name, template=self._template, data={"question": question}
            )
            options: CompletionOptions = {
                "temperature": self._config.temperature,
                "max_tokens": self._config.max_tokens,
            }
            calls = [
                self._make_call(prompt=prompt, options=options, index=index)
                for index in range(self._config.num_answers)
            ]

            timeout_seconds = self._config.timeout.total_seconds()
            try:
                async with asyncio.timeout(timeout_seconds):
                    contents = await gather_bounded(
                        calls, limit=self._config.max_concurrency
                    )
            except TimeoutError as exc:
                raise UnitTimeoutError(
                    unit=self._name, timeout_seconds=timeout_seconds
                ) from exc

            answers = tuple(
                Answer(id=f"{self._name}_answer_{index + 1}", content=content)
                for index, content in enumerate(contents)
            )
            return state.with_(ANSWERS, answers)

    def _make_call(
        self, prompt: str, options: CompletionOptions, index: int
    ) -> Callable[[], Awaitable[str]]:
        async def call() -> str:
            try:
                return await self._llm_client.complete(prompt=prompt, options=options)
            except Exception as exc:
                raise ModelCallError(
                    unit=self._name,
                    reason=f"answer {index + 1}: {exc}",
                    retriable=getattr(exc, "retriable", False),
                ) from exc

        return call
