"""Error types raised by units while executing.

Every error names the unit, the operation it was attempting and the cause,
rendered as "Failed to <operation> in unit '<unit>': <reason>".
"""

from verdict_kit.core.errors import VerdictKitError


class UnitError(VerdictKitError):
    """Base class for failures raised from a unit's execute()."""

    def __init__(
        self, unit: str, operation: str, reason: str, retriable: bool = False
    ) -> None:
        self.unit = unit
        self.operation = operation
        self.reason = reason
        super().__init__(
            f"Failed to {operation} in unit '{unit}': {reason}", retriable=retriable
        )


class MissingInputError(UnitError):
    """A required state key is absent or empty."""

    def __init__(self, unit: str, key: str) -> None:
        self.key = key
        super().__init__(
            unit=unit,
            operation="read inputs",
            reason=f"required state key '{key}' is missing or empty",
        )


class InputSizeError(UnitError):
    """Too many answers, or a string larger than the content limit."""

    def __init__(self, unit: str, reason: str) -> None:
        super().__init__(unit=unit, operation="read inputs", reason=reason)


class TemplateExecutionError(UnitError):
    """The unit's prompt template failed while rendering."""

    def __init__(self, unit: str, reason: str) -> None:
        super().__init__(unit=unit, operation="render prompt", reason=reason)


class ModelCallError(UnitError):
    """The language-model client raised."""

    def __init__(self, unit: str, reason: str, retriable: bool = False) -> None:
        super().__init__(
            unit=unit, operation="call model", reason=reason, retriable=retriable
        )


class ResponseParseError(UnitError):
    """The model response held no JSON object or the object was malformed."""

    def __init__(self, unit: str, reason: str) -> None:
        super().__init__(unit=unit, operation="parse model response", reason=reason)


class InvalidScoreError(UnitError):
    """A score is NaN, infinite or outside the configured scale."""

    def __init__(self, unit: str, reason: str) -> None:
        super().__init__(unit=unit, operation="validate scores", reason=reason)


class ScoreMismatchError(UnitError):
    """Answer and score counts differ while every answer must be scored."""

    def __init__(self, unit: str, answers: int, scores: int) -> None:
        self.answers = answers
        self.scores = scores
        super().__init__(
            unit=unit,
            operation="aggregate scores",
            reason=f"got {scores} scores for {answers} answers",
        )


class NoScoresError(UnitError):
    """Nothing is left to aggregate."""

    def __init__(self, unit: str) -> None:
        super().__init__(
            unit=unit, operation="aggregate scores", reason="no scores to aggregate"
        )


class BelowMinScoreError(UnitError):
    """The aggregate statistic is below the configured minimum."""

    def __init__(self, unit: str, statistic: str, value: float, minimum: float) -> None:
        self.value = value
        self.minimum = minimum
        super().__init__(
            unit=unit,
            operation="aggregate scores",
            reason=f"score below minimum: {statistic}={value:.3f}, minimum={minimum:.3f}",
        )


class TieError(UnitError):
    """Several candidates are tied and the tie-breaker is "error"."""

    def __init__(self, unit: str, detail: str) -> None:
        self.detail = detail
        super().__init__(
            unit=unit, operation="aggregate scores", reason=f"tie detected: {detail}"
        )


class ConfidenceBelowMinimumError(UnitError):
    """A judge reported less confidence than the unit requires."""

    def __init__(self, unit: str, confidence: float, minimum: float) -> None:
        self.confidence = confidence
        self.minimum = minimum
        super().__init__(
            unit=unit,
            operation="validate judge response",
            reason=f"confidence {confidence:.2f} is below minimum {minimum:.2f}",
        )


class ContextLimitExceededError(UnitError):
    """The rendered prompt would not fit the model's context cap."""

    def __init__(self, unit: str, prompt_tokens: int, limit: int) -> None:
        self.prompt_tokens = prompt_tokens
        self.limit = limit
        super().__init__(
            unit=unit,
            operation="call model",
            reason=(
                f"prompt too large ({prompt_tokens} tokens) "
                f"for model context limit ({limit})"
            ),
        )


class UnitTimeoutError(UnitError):
    """The unit's own deadline expired before the batch finished."""

    def __init__(self, unit: str, timeout_seconds: float) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(
            unit=unit,
            operation="generate answers",
            reason=f"deadline of {timeout_seconds:g}s exceeded",
            retriable=True,
        )


class BudgetExceededError(UnitError):
    """Recorded usage is over a per-run token or call limit."""

    def __init__(self, unit: str, limit_type: str, limit: int, used: int) -> None:
        self.limit_type = limit_type
        self.limit = limit
        self.used = used
        super().__init__(
            unit=unit,
            operation="enforce budget",
            reason=f"{limit_type} limit={limit}, used={used}",
        )
