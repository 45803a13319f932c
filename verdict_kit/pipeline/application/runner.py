"""PipelineRunner — executes units one after another, threading the state."""

import asyncio
import time
import uuid
from collections.abc import Sequence

from verdict_kit.core.errors import VerdictKitError
from verdict_kit.evaluation.domain.state import State
from verdict_kit.pipeline.domain.observer import PipelineObserver
from verdict_kit.unit.domain.unit import Unit


class PipelineRunner:
    """Runs a fixed, ordered list of units.

    Each unit receives the state produced by the one before it. The runner
    does not decide ordering or parallelism; it executes the list as given.
    """

    def __init__(
        self, name: str, units: Sequence[Unit], observer: PipelineObserver
    ) -> None:
        self._name = name
        self._units = tuple(units)
        self._observer = observer

    @property
    def units(self) -> tuple[Unit, ...]:
        return self._units

    def validate(self) -> None:
        """Validate every unit, stopping at the first invalid one.

        Raises:
            ConfigValidationError: from the first unit that fails validation.
        """
        for unit in self._units:
            unit.validate()

    async def run(self, state: State) -> State:
        """Execute every unit in order and return the final state.

        Raises:
            VerdictKitError: the first unit failure, after it is reported.
            asyncio.CancelledError: if the run is cancelled.
        """
        run_id = str(uuid.uuid4())
        self._observer.pipeline_started(
            run_id=run_id,
            pipeline=self._name,
            unit_names=[unit.name for unit in self._units],
        )
        started_at = time.monotonic()

        for unit in self._units:
            unit_started = time.monotonic()
            try:
                state = await unit.execute(state)
            except VerdictKitError as exc:
                self._observer.pipeline_failed(
                    run_id=run_id, pipeline=self._name, unit=unit.name, reason=str(exc)
                )
                raise
            except asyncio.CancelledError:
                self._observer.pipeline_failed(
                    run_id=run_id, pipeline=self._name, unit=unit.name, reason="cancelled"
                )
                raise
            self._observer.pipeline_unit_completed(
                run_id=run_id,
                pipeline=self._name,
                unit=unit.name,
                duration_ms=int((time.monotonic() - unit_started) * 1000),
            )

        self._observer.pipeline_completed(
            run_id=run_id,
            pipeline=self._name,
            elapsed_seconds=time.monotonic() - started_at,
        )
        return state
