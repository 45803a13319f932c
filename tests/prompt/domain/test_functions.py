"""Tests for the helper functions exposed to prompt templates."""

import pytest

from verdict_kit.prompt.domain.functions import (
    TEMPLATE_FUNCTIONS,
    div,
    mod,
    split,
    truncate,
)


class TestArithmetic:
    def test_div_by_zero_returns_zero(self) -> None:
        assert div(7, 0) == 0

    def test_mod_by_zero_returns_zero(self) -> None:
        assert mod(7, 0) == 0

    @pytest.mark.parametrize(
        ("a", "b", "expected"),
        [(7, 2, 3), (-7, 2, -3), (7, -2, -3), (-7, -2, 3)],
    )
    def test_div_truncates_toward_zero(self, a: int, b: int, expected: int) -> None:
        assert div(a, b) == expected

    def test_mod_takes_sign_of_dividend(self) -> None:
        assert mod(-7, 2) == -1
        assert mod(7, -2) == 1


class TestTruncate:
    @pytest.mark.parametrize(
        ("text", "length", "expected"),
        [
            ("hello", 0, ""),
            ("hello", -1, ""),
            ("hello", 5, "hello"),
            ("hello", 10, "hello"),
            ("hello world", 8, "hello..."),
            ("hello", 3, "hel"),
            ("hello", 2, "he"),
        ],
    )
    def test_truncate(self, text: str, length: int, expected: str) -> None:
        assert truncate(text, length) == expected


class TestStrings:
    def test_split_on_empty_separator_gives_characters(self) -> None:
        assert split("abc", "") == ["a", "b", "c"]

    def test_split_on_separator(self) -> None:
        assert split("a,b", ",") == ["a", "b"]

    def test_registered_names(self) -> None:
        assert set(TEMPLATE_FUNCTIONS) == {
            "add", "sub", "mul", "div", "mod",
            "contains", "hasPrefix", "hasSuffix",
            "lower", "upper", "trim", "replace", "join", "split", "truncate",
        }
