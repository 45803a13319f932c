"""StructlogPipelineObserver — production observer that delegates to structlog."""

import structlog


class StructlogPipelineObserver:
    """Logs pipeline domain events to structlog.

    Does NOT inherit from PipelineObserver (structural typing via Protocol).
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def pipeline_started(self, run_id: str, pipeline: str, unit_names: list[str]) -> None:
        self._log.info(
            "pipeline.started", run_id=run_id, pipeline=pipeline, unit_names=unit_names
        )

    def pipeline_unit_completed(
        self, run_id: str, pipeline: str, unit: str, duration_ms: int
    ) -> None:
        self._log.info(
            "pipeline.unit_completed",
            run_id=run_id,
            pipeline=pipeline,
            unit=unit,
            duration_ms=duration_ms,
        )

    def pipeline_completed(
        self, run_id: str, pipeline: str, elapsed_seconds: float
    ) -> None:
        self._log.info(
            "pipeline.completed",
            run_id=run_id,
            pipeline=pipeline,
            elapsed_seconds=round(elapsed_seconds, 2),
        )

    def pipeline_failed(
        self, run_id: str, pipeline: str, unit: str, reason: str
    ) -> None:
        self._log.error(
            "pipeline.failed", run_id=run_id, pipeline=pipeline, unit=unit, reason=reason
        )
