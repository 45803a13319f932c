"""Tests for the verdict-kit command line."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from verdict_kit.cli.main import app

# __file__ is tests/cli/test_cli.py
FIXTURES = Path(__file__).parent.parent / "fixtures"

runner = CliRunner()


class TestValidateCommand:
    def test_valid_pipeline(self) -> None:
        result = runner.invoke(app, ["validate", str(FIXTURES / "exact_match_pipeline.yaml")])

        assert result.exit_code == 0
        assert "Pipeline 'exact-match-check' is valid (2 units)." in result.output

    def test_llm_pipeline_builds_client_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JUDGE_MODEL", "gpt-4o")

        result = runner.invoke(app, ["validate", str(FIXTURES / "llm_pipeline.yaml")])

        assert result.exit_code == 0
        assert "(4 units)" in result.output

    def test_wrapper_units_build(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("JUDGE_MODEL", "gpt-4o")

        result = runner.invoke(app, ["validate", str(FIXTURES / "wrapped_units_pipeline.yaml")])

        assert result.exit_code == 0
        assert "Pipeline 'debiased-judging' is valid (3 units)." in result.output

    def test_duplicate_ids_fail(self) -> None:
        result = runner.invoke(app, ["validate", str(FIXTURES / "duplicate_ids_pipeline.yaml")])

        assert result.exit_code == 1
        assert "duplicate unit ids: matcher" in result.output

    def test_invalid_log_format(self) -> None:
        result = runner.invoke(
            app,
            ["validate", str(FIXTURES / "exact_match_pipeline.yaml"), "--log-format", "xml"],
        )

        assert result.exit_code == 1
        assert "Invalid log format" in result.output


class TestRunCommand:
    def test_exact_match_pipeline(self) -> None:
        result = runner.invoke(
            app,
            [
                "run",
                str(FIXTURES / "exact_match_pipeline.yaml"),
                "--question", "Greet the world",
                "--reference", "hello world",
                "--answer", "Hello World",
                "--answer", "Goodbye",
                "--log-format", "json",
            ],
        )

        assert result.exit_code == 0, result.output
        assert "pool_verdict" in result.output
        assert "input_answer_1" in result.output

    def test_missing_answers_exit_nonzero(self) -> None:
        result = runner.invoke(
            app,
            [
                "run",
                str(FIXTURES / "exact_match_pipeline.yaml"),
                "-q", "Greet the world",
                "-r", "hello world",
            ],
        )

        assert result.exit_code == 1
        assert "required state key 'answers' is missing or empty" in result.output
