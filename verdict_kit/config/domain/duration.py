"""Duration parsing for config fields such as the Answerer timeout."""

import re
from datetime import timedelta
from typing import Annotated

from pydantic import BeforeValidator

_UNIT_SECONDS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}

_COMPONENT = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")
_GO_DURATION = re.compile(r"(?:\d+(?:\.\d+)?(?:ns|us|µs|ms|s|m|h))+")


def parse_go_duration(text: str) -> timedelta:
    """Parse a duration written like "30s", "1m30s" or "500ms".

    Raises:
        ValueError: if text is not a sequence of <number><unit> components.
    """
    stripped = text.strip()
    if not _GO_DURATION.fullmatch(stripped):
        raise ValueError(f"invalid duration: {text!r}")
    seconds = sum(
        float(amount) * _UNIT_SECONDS[unit]
        for amount, unit in _COMPONENT.findall(stripped)
    )
    return timedelta(seconds=seconds)


def _coerce_duration(value: object) -> object:
    # Strings pydantic already understands (ISO 8601, plain numbers) pass through.
    if isinstance(value, str) and _GO_DURATION.fullmatch(value.strip()):
        return parse_go_duration(value)
    return value


Duration = Annotated[timedelta, BeforeValidator(_coerce_duration)]
