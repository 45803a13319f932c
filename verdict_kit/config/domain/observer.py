"""Observer port for the config domain — defines events in domain language."""

from typing import Protocol


class ConfigObserver(Protocol):
    def config_loaded(self, name: str, units_count: int) -> None: ...

    def config_high_temperature_warning(self, unit: str, temperature: float) -> None: ...
