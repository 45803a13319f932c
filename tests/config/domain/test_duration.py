"""Tests for duration parsing."""

from datetime import timedelta

import pytest

from verdict_kit.config.domain.duration import parse_go_duration


class TestParseGoDuration:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("30s", timedelta(seconds=30)),
            ("1m30s", timedelta(seconds=90)),
            ("500ms", timedelta(milliseconds=500)),
            ("1.5h", timedelta(minutes=90)),
            (" 2m ", timedelta(minutes=2)),
        ],
    )
    def test_valid_durations(self, text: str, expected: timedelta) -> None:
        assert parse_go_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "30", "thirty seconds", "30x", "-5s"])
    def test_invalid_durations(self, text: str) -> None:
        with pytest.raises(ValueError, match="invalid duration"):
            parse_go_duration(text)
