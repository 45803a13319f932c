"""${ENV_VAR} substitution over parsed YAML data."""

import os
import re
from collections.abc import Mapping

_ENV_VAR = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")

type RawValue = (
    str | int | float | bool | None | list["RawValue"] | dict[str, "RawValue"]
)


def find_missing_env_vars(data: RawValue, environ: Mapping[str, str] | None = None) -> list[str]:
    """Return every referenced variable absent from environ, in first-seen order."""
    env = os.environ if environ is None else environ
    missing: list[str] = []
    for text in _strings(data):
        for name in _ENV_VAR.findall(text):
            if name not in env and name not in missing:
                missing.append(name)
    return missing


def substitute_env_vars(data: RawValue, environ: Mapping[str, str] | None = None) -> RawValue:
    """Return a copy of data with every ${VAR} replaced by its value.

    Every referenced variable must be set; check with find_missing_env_vars
    first.
    """
    env = os.environ if environ is None else environ
    match data:
        case str():
            return _ENV_VAR.sub(lambda m: env[m.group(1)], data)
        case list():
            return [substitute_env_vars(item, env) for item in data]
        case dict():
            return {key: substitute_env_vars(value, env) for key, value in data.items()}
    return data


def _strings(data: RawValue) -> list[str]:
    match data:
        case str():
            return [data]
        case list():
            return [text for item in data for text in _strings(item)]
        case dict():
            return [text for value in data.values() for text in _strings(value)]
    return []
