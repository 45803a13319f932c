"""Construction and execution helpers shared by every unit implementation."""

import asyncio
import time
from collections.abc import Iterator
from contextlib import contextmanager

from verdict_kit.config.infrastructure.errors import ConfigValidationError
from verdict_kit.core.errors import VerdictKitError
from verdict_kit.unit.domain.observer import UnitObserver


def require_unit_name(name: str) -> str:
    """Return name unchanged.

    Raises:
        ConfigValidationError: if name is empty or only whitespace.
    """
    if not name or not name.strip():
        raise ConfigValidationError("unit name cannot be empty")
    return name


@contextmanager
def observed_execution(
    observer: UnitObserver, unit: str, unit_type: str
) -> Iterator[None]:
    """Report start, completion (with duration) or failure of one execute call."""
    observer.unit_execution_started(unit=unit, unit_type=unit_type)
    start = time.monotonic()
    try:
        yield
    except VerdictKitError as exc:
        observer.unit_execution_failed(unit=unit, unit_type=unit_type, reason=str(exc))
        raise
    except asyncio.CancelledError:
        observer.unit_execution_failed(unit=unit, unit_type=unit_type, reason="cancelled")
        raise
    duration_ms = int((time.monotonic() - start) * 1000)
    observer.unit_execution_completed(
        unit=unit, unit_type=unit_type, duration_ms=duration_ms
    )
