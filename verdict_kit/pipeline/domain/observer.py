"""Observer port for the pipeline domain — defines events in domain language."""

from typing import Protocol


class PipelineObserver(Protocol):
    """Observer port emitting structured events while a pipeline runs.

    Implementations may log to structlog, record for tests, or emit metrics.
    """

    def pipeline_started(self, run_id: str, pipeline: str, unit_names: list[str]) -> None: ...

    def pipeline_unit_completed(
        self, run_id: str, pipeline: str, unit: str, duration_ms: int
    ) -> None: ...

    def pipeline_completed(
        self, run_id: str, pipeline: str, elapsed_seconds: float
    ) -> None: ...

    def pipeline_failed(
        self, run_id: str, pipeline: str, unit: str, reason: str
    ) -> None: ...
