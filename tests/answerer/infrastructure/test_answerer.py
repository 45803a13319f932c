"""Tests for AnswererUnit."""

import asyncio
from datetime import timedelta

import pytest

from tests.llm.fake_llm_client import FakeLLMClient
from tests.unit.fake_observer import FakeUnitObserver
from verdict_kit.answerer.infrastructure.answerer import AnswererUnit
from verdict_kit.config.domain.answerer import AnswererConfig
from verdict_kit.config.infrastructure.errors import ConfigValidationError
from verdict_kit.evaluation.domain.limits import MAX_CONTENT_BYTES
from verdict_kit.evaluation.domain.state import ANSWERS, QUESTION, State, new_state
from verdict_kit.llm.infrastructure.errors import LLMInvocationError
from verdict_kit.unit.infrastructure.errors import (
    InputSizeError,
    MissingInputError,
    ModelCallError,
    TemplateExecutionError,
    UnitTimeoutError,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_unit(
    client: FakeLLMClient | None = None,
    config: AnswererConfig | None = None,
    observer: FakeUnitObserver | None = None,
    name: str = "answerer",
) -> tuple[AnswererUnit, FakeLLMClient, FakeUnitObserver]:
    llm = client if client is not None else FakeLLMClient()
    obs = observer if observer is not None else FakeUnitObserver()
    unit = AnswererUnit(
        name=name,
        llm_client=llm,
        config=config if config is not None else AnswererConfig(),
        observer=obs,
    )
    return unit, llm, obs


def _question_state(question: str = "What is the capital of France?") -> State:
    return new_state().with_(QUESTION, question)


# ---------------------------------------------------------------------------
# execute(): success path
# ---------------------------------------------------------------------------


class TestExecuteSuccess:
    async def test_writes_num_answers_with_positional_ids(self) -> None:
        client = FakeLLMClient(responses=["Paris", "It is Paris", "Paris, France"])
        unit, _, _ = _make_unit(client=client, config=AnswererConfig(num_answers=3))

        result = await unit.execute(_question_state())

        answers = result.get(ANSWERS)
        assert answers is not None
        assert [a.id for a in answers] == [
            "answerer_answer_1",
            "answerer_answer_2",
            "answerer_answer_3",
        ]
        assert [a.content for a in answers] == ["Paris", "It is Paris", "Paris, France"]

    async def test_results_follow_call_index_not_completion_order(self) -> None:
        client = FakeLLMClient(responses=["slow", "fast"], delays=[0.05, 0.0])
        unit, _, _ = _make_unit(client=client, config=AnswererConfig(num_answers=2))

        result = await unit.execute(_question_state())

        answers = result.get(ANSWERS)
        assert answers is not None
        assert [a.content for a in answers] == ["slow", "fast"]

    async def test_renders_prompt_with_question(self) -> None:
        unit, client, _ = _make_unit(
            config=AnswererConfig(num_answers=1, prompt="Answer briefly: {{ question }}")
        )

        await unit.execute(_question_state("2+2?"))

        assert client.calls[0].prompt == "Answer briefly: 2+2?"

    async def test_passes_temperature_and_max_tokens(self) -> None:
        unit, client, _ = _make_unit(
            config=AnswererConfig(num_answers=1, temperature=0.2, max_tokens=100)
        )

        await unit.execute(_question_state())

        assert client.calls[0].options == {"temperature": 0.2, "max_tokens": 100}

    async def test_concurrency_is_bounded(self) -> None:
        client = FakeLLMClient(delay=0.02)
        unit, _, _ = _make_unit(
            client=client, config=AnswererConfig(num_answers=10, max_concurrency=2)
        )

        await unit.execute(_question_state())

        assert len(client.calls) == 10
        assert client.max_in_flight == 2

    async def test_emits_completed(self) -> None:
        unit, _, observer = _make_unit(config=AnswererConfig(num_answers=1))

        await unit.execute(_question_state())

        assert observer.completed[0].unit_type == "answerer"


# ---------------------------------------------------------------------------
# execute(): failure path
# ---------------------------------------------------------------------------


class TestExecuteFailure:
    async def test_missing_question(self) -> None:
        unit, client, _ = _make_unit()

        with pytest.raises(MissingInputError, match="question"):
            await unit.execute(new_state())

        assert client.calls == []

    async def test_oversized_question(self) -> None:
        unit, client, _ = _make_unit()

        with pytest.raises(InputSizeError, match="question exceeds limit"):
            await unit.execute(_question_state("q" * (MAX_CONTENT_BYTES + 1)))

        assert client.calls == []

    async def test_model_failure_names_answer_and_keeps_retriable(self) -> None:
        client = FakeLLMClient(
            responses=["ok", LLMInvocationError(model="gpt-4o", reason="rate limit", retriable=True)]
        )
        unit, _, observer = _make_unit(
            client=client, config=AnswererConfig(num_answers=2, max_concurrency=1)
        )

        with pytest.raises(ModelCallError) as exc_info:
            await unit.execute(_question_state())

        assert "answer 2" in str(exc_info.value)
        assert exc_info.value.retriable is True
        assert len(observer.failed) == 1

    async def test_failure_cancels_other_calls(self) -> None:
        client = FakeLLMClient(responses=["late", RuntimeError("boom")], delays=[1.0, 0.0])
        unit, _, _ = _make_unit(client=client, config=AnswererConfig(num_answers=2))

        with pytest.raises(ModelCallError, match="boom"):
            await unit.execute(_question_state())

        assert client.cancelled == 1

    async def test_timeout(self) -> None:
        client = FakeLLMClient(delay=5.0)
        unit, _, _ = _make_unit(
            client=client,
            config=AnswererConfig(num_answers=2, timeout=timedelta(seconds=1)),
        )

        with pytest.raises(UnitTimeoutError) as exc_info:
            await unit.execute(_question_state())

        assert exc_info.value.retriable is True
        assert client.cancelled == 2

    async def test_cancelled_before_execute_writes_nothing(self) -> None:
        unit, client, observer = _make_unit()
        state = _question_state()

        task = asyncio.create_task(unit.execute(state))
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert client.calls == []
        assert state.get(ANSWERS) is None

    async def test_cancelled_mid_flight_cancels_calls(self) -> None:
        client = FakeLLMClient(delay=5.0)
        unit, _, observer = _make_unit(client=client, config=AnswererConfig(num_answers=3))

        task = asyncio.create_task(unit.execute(_question_state()))
        await asyncio.sleep(0.05)
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

        assert client.cancelled == 3
        assert observer.failed[0].reason == "cancelled"

    async def test_render_failure(self) -> None:
        unit, _, _ = _make_unit(
            config=AnswererConfig(prompt="{{ question }} and {{ div(question, 2) }}")
        )

        with pytest.raises(TemplateExecutionError):
            await unit.execute(_question_state())


# ---------------------------------------------------------------------------
# Construction, validate() and reconfigure()
# ---------------------------------------------------------------------------


class TestConfiguration:
    def test_prompt_must_reference_question(self) -> None:
        with pytest.raises(ConfigValidationError, match="must reference question"):
            _make_unit(config=AnswererConfig(prompt="Tell me something interesting"))

    def test_from_mapping(self) -> None:
        unit = AnswererUnit.from_mapping(
            "gen", {"num_answers": 4, "timeout": "2m"}, FakeLLMClient(), FakeUnitObserver()
        )

        assert unit.config.num_answers == 4
        assert unit.config.timeout == timedelta(minutes=2)

    def test_reconfigure_keeps_other_settings(self) -> None:
        unit, _, _ = _make_unit(config=AnswererConfig(num_answers=2, temperature=0.1))

        updated = unit.reconfigure({"num_answers": 5})

        assert updated.config.num_answers == 5
        assert updated.config.temperature == 0.1
        assert unit.config.num_answers == 2

    def test_reconfigure_rejects_invalid_prompt(self) -> None:
        unit, _, _ = _make_unit()

        with pytest.raises(ConfigValidationError):
            unit.reconfigure({"prompt": "no placeholder at all here"})

    def test_validate_accepts_defaults(self) -> None:
        unit, _, _ = _make_unit()

        unit.validate()
