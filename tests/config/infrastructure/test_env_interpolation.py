"""Tests for ${ENV_VAR} interpolation."""

from verdict_kit.config.infrastructure.env_interpolation import (
    find_missing_env_vars,
    substitute_env_vars,
)


class TestFindMissingEnvVars:
    def test_collects_every_missing_var_once(self) -> None:
        data = {"a": "${ONE}", "b": ["${TWO}", "x ${ONE}"], "c": {"d": "${SET}"}}

        assert find_missing_env_vars(data, environ={"SET": "1"}) == ["ONE", "TWO"]

    def test_non_strings_are_ignored(self) -> None:
        assert find_missing_env_vars({"a": 1, "b": None, "c": True}, environ={}) == []


class TestSubstituteEnvVars:
    def test_replaces_nested_references(self) -> None:
        data = {"model": "${MODEL}", "units": [{"prompt": "use ${MODEL} now"}], "n": 3}

        result = substitute_env_vars(data, environ={"MODEL": "gpt-4o"})

        assert result == {"model": "gpt-4o", "units": [{"prompt": "use gpt-4o now"}], "n": 3}

    def test_text_without_references_is_unchanged(self) -> None:
        assert substitute_env_vars("plain $HOME text", environ={}) == "plain $HOME text"
