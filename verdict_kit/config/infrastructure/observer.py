"""Structlog implementation of the ConfigObserver port."""

import structlog


class StructlogConfigObserver:
    """Delegates config domain events to structlog.

    Satisfies the ConfigObserver protocol structurally.
    """

    def __init__(self) -> None:
        self._log = structlog.get_logger()

    def config_loaded(self, name: str, units_count: int) -> None:
        self._log.info("config.loaded", name=name, units_count=units_count)

    def config_high_temperature_warning(self, unit: str, temperature: float) -> None:
        self._log.warning(
            "config.high_temperature_warning",
            unit=unit,
            temperature=temperature,
            message="Scoring temperature > 0.0 may produce non-deterministic results",
        )
