"""Structlog implementation of the UnitObserver port."""

import structlog


class StructlogUnitObserver:
    """Delegates unit domain events to structlog.

    Satisfies the UnitObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def unit_execution_started(self, unit: str, unit_type: str) -> None:
        self._log.debug("unit.execution_started", unit=unit, unit_type=unit_type)

    def unit_execution_completed(
        self, unit: str, unit_type: str, duration_ms: int
    ) -> None:
        self._log.info(
            "unit.execution_completed",
            unit=unit,
            unit_type=unit_type,
            duration_ms=duration_ms,
        )

    def unit_execution_failed(self, unit: str, unit_type: str, reason: str) -> None:
        self._log.error(
            "unit.execution_failed", unit=unit, unit_type=unit_type, reason=reason
        )

    def model_call_retried(
        self, unit: str, attempt: int, delay_seconds: float, reason: str
    ) -> None:
        self._log.warning(
            "unit.model_call_retried",
            unit=unit,
            attempt=attempt,
            delay_seconds=round(delay_seconds, 3),
            reason=reason,
        )

    def review_flagged(self, unit: str, confidence: float, threshold: float) -> None:
        self._log.warning(
            "unit.review_flagged",
            unit=unit,
            confidence=confidence,
            threshold=threshold,
        )

    def answers_truncated(
        self, unit: str, answers_count: int, available_tokens: int
    ) -> None:
        self._log.warning(
            "unit.answers_truncated",
            unit=unit,
            answers_count=answers_count,
            available_tokens=available_tokens,
        )

    def budget_exceeded(self, unit: str, limit_type: str, limit: int, used: int) -> None:
        self._log.warning(
            "unit.budget_exceeded",
            unit=unit,
            limit_type=limit_type,
            limit=limit,
            used=used,
        )
