"""Tests for model-family heuristics."""

import pytest

from verdict_kit.llm.domain.tokens import (
    DEFAULT_CONTEXT_LIMIT,
    context_limit_for_model,
    estimate_tokens,
    supports_json_mode,
)


class TestEstimateTokens:
    def test_four_characters_per_token(self) -> None:
        assert estimate_tokens("a" * 400) == 100

    def test_empty_text(self) -> None:
        assert estimate_tokens("") == 0


class TestContextLimit:
    @pytest.mark.parametrize(
        ("model", "expected"),
        [
            ("gpt-4o", 6000),
            ("openai/GPT-4-turbo", 6000),
            ("gpt-3.5-turbo", 3000),
            ("anthropic/claude-3-haiku", 8000),
            ("ollama/llama3", DEFAULT_CONTEXT_LIMIT),
        ],
    )
    def test_family_caps(self, model: str, expected: int) -> None:
        assert context_limit_for_model(model) == expected


class TestSupportsJsonMode:
    @pytest.mark.parametrize(
        ("model", "expected"),
        [("gpt-4o", True), ("claude-3-opus", True), ("mistral-large", False)],
    )
    def test_json_mode_detection(self, model: str, expected: bool) -> None:
        assert supports_json_mode(model) is expected
