"""Tests for tolerant JSON extraction from model output."""

import json

from verdict_kit.prompt.domain.json_extract import extract_json


class TestFencedBlocks:
    def test_json_fence_returns_inner_object_exactly(self) -> None:
        response = 'Here is my analysis:\n```json\n{"confidence": 0.9, "reasoning": "x"}\n```'

        assert extract_json(response) == '{"confidence": 0.9, "reasoning": "x"}'

    def test_generic_fence_with_object(self) -> None:
        response = 'Result:\n```\n{"score": 7}\n```\nThanks.'

        assert extract_json(response) == '{"score": 7}'

    def test_json_fence_wins_over_earlier_bare_object(self) -> None:
        response = 'first {"a": 1}\n```json\n{"b": 2}\n```'

        assert extract_json(response) == '{"b": 2}'


class TestBalancedScan:
    def test_object_surrounded_by_chatter(self) -> None:
        response = 'Sure! {"score": 8, "reasoning": "solid"} Hope that helps.'

        assert json.loads(extract_json(response)) == {"score": 8, "reasoning": "solid"}

    def test_nested_objects(self) -> None:
        response = 'x {"outer": {"inner": 1}} y'

        assert extract_json(response) == '{"outer": {"inner": 1}}'

    def test_braces_inside_strings_are_ignored(self) -> None:
        response = '{"reasoning": "uses } and { freely", "score": 1}'

        assert extract_json(response) == response

    def test_escaped_quote_inside_string(self) -> None:
        response = 'prefix {"reasoning": "said \\"}\\" loudly"} suffix'

        assert extract_json(response) == '{"reasoning": "said \\"}\\" loudly"}'

    def test_unbalanced_object_returns_empty(self) -> None:
        assert extract_json('{"score": 1') == ""

    def test_no_object_returns_empty(self) -> None:
        assert extract_json("I cannot answer that.") == ""

    def test_empty_input_returns_empty(self) -> None:
        assert extract_json("") == ""
