"""UnitObserver port — domain events emitted while units execute."""

from typing import Protocol


class UnitObserver(Protocol):
    """Observer port for unit domain events.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def unit_execution_started(self, unit: str, unit_type: str) -> None: ...

    def unit_execution_completed(
        self, unit: str, unit_type: str, duration_ms: int
    ) -> None: ...

    def unit_execution_failed(self, unit: str, unit_type: str, reason: str) -> None: ...

    def model_call_retried(
        self, unit: str, attempt: int, delay_seconds: float, reason: str
    ) -> None: ...

    def review_flagged(self, unit: str, confidence: float, threshold: float) -> None: ...

    def answers_truncated(
        self, unit: str, answers_count: int, available_tokens: int
    ) -> None: ...

    def budget_exceeded(self, unit: str, limit_type: str, limit: int, used: int) -> None: ...
