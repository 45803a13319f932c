"""Error types raised by config infrastructure."""

from collections.abc import Iterable
from pathlib import Path

from verdict_kit.core.errors import VerdictKitError


class MissingEnvVarsError(VerdictKitError):
    """Raised when one or more required environment variables are not set."""

    def __init__(self, missing_vars: list[str]) -> None:
        self.missing_vars = missing_vars
        var_list = ", ".join(sorted(missing_vars))
        super().__init__(
            f"Failed to load config: missing environment variables: {var_list}"
        )


class ConfigValidationError(VerdictKitError):
    """Raised when a unit or pipeline configuration fails validation."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Failed to validate config: {reason}")


class UnknownUnitTypeError(ConfigValidationError):
    """Raised when a unit type has no registered factory."""

    def __init__(self, unit_type: str, known_types: Iterable[str]) -> None:
        self.unit_type = unit_type
        known = ", ".join(sorted(known_types))
        super().__init__(f"unknown unit type '{unit_type}' (known: {known})")


class ConfigLoadError(VerdictKitError):
    """Raised when the config file cannot be opened, read or parsed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to load config from {path}: {reason}")
