"""ScoreScale value object and the "min-max" scale parser."""

import math

from pydantic import BaseModel

MIN_SCORE_VALUE = -1000.0
MAX_SCORE_VALUE = 1000.0
MIN_SCORE_RANGE = 0.01


class ScoreScaleError(ValueError):
    """Raised when a score scale string is malformed or out of bounds."""


class ScoreScale(BaseModel, frozen=True):
    """Closed interval [minimum, maximum] that judge scores must fall in."""

    minimum: float
    maximum: float

    def contains(self, score: float) -> bool:
        return self.minimum <= score <= self.maximum

    def __str__(self) -> str:
        return f"{self.minimum:g}-{self.maximum:g}"


def split_score_scale(text: str) -> tuple[str, str]:
    """Split "min-max" into its two endpoint strings.

    A dash that opens an endpoint is read as a minus sign, so "-5-10",
    "1--3" and "-5--3" all split into two signed endpoints. Any other dash
    layout is rejected.

    Raises:
        ScoreScaleError: if text does not have the shape "min-max".
    """
    parts = text.split("-")
    match parts:
        case [low, high] if low != "":
            return low, high
        case ["", low, high] if low != "":
            return f"-{low}", high
        case [low, "", high] if low != "":
            return low, f"-{high}"
        case ["", low, "", high]:
            return f"-{low}", f"-{high}"
    raise ScoreScaleError(f"score scale must be in format 'min-max', got: {text}")


def parse_score_scale(text: str) -> ScoreScale:
    """Parse and bound-check a "min-max" score scale.

    Raises:
        ScoreScaleError: if the shape is wrong, an endpoint is not a finite
            number, an endpoint lies outside +/-1000, minimum >= maximum, or
            the range is narrower than 0.01.
    """
    low_text, high_text = split_score_scale(text)
    minimum = _parse_endpoint(low_text, "minimum")
    maximum = _parse_endpoint(high_text, "maximum")

    if minimum < MIN_SCORE_VALUE:
        raise ScoreScaleError(
            f"minimum score value {minimum:.2f} is too low "
            f"(must be >= {MIN_SCORE_VALUE:.0f})"
        )
    if maximum > MAX_SCORE_VALUE:
        raise ScoreScaleError(
            f"maximum score value {maximum:.2f} is too high "
            f"(must be <= {MAX_SCORE_VALUE:.0f})"
        )
    if minimum >= maximum:
        raise ScoreScaleError(
            "minimum value must be less than maximum value in score scale"
        )
    if maximum - minimum < MIN_SCORE_RANGE:
        raise ScoreScaleError(
            f"score scale range {maximum - minimum:.4f} is too narrow "
            f"(must be >= {MIN_SCORE_RANGE})"
        )
    return ScoreScale(minimum=minimum, maximum=maximum)


def _parse_endpoint(text: str, label: str) -> float:
    stripped = text.strip()
    try:
        value = float(stripped)
    except ValueError:
        raise ScoreScaleError(
            f"invalid {label} value in score scale: {text!r}"
        ) from None
    if "_" in stripped or not math.isfinite(value):
        raise ScoreScaleError(f"invalid {label} value in score scale: {text!r}")
    return value
