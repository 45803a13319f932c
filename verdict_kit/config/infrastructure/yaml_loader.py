"""YAML pipeline loader — parses, interpolates env vars, validates, and emits observer events."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from verdict_kit.config.domain.observer import ConfigObserver
from verdict_kit.config.domain.pipeline import PipelineConfig
from verdict_kit.config.infrastructure.env_interpolation import (
    find_missing_env_vars,
    substitute_env_vars,
)
from verdict_kit.config.infrastructure.errors import (
    ConfigLoadError,
    ConfigValidationError,
    MissingEnvVarsError,
)

# Unit types whose temperature controls scoring rather than generation.
_SCORING_UNIT_TYPES = frozenset({"score_judge", "verification"})


def load_pipeline_config(path: Path, observer: ConfigObserver) -> PipelineConfig:
    """Load, interpolate, validate, and return a PipelineConfig from a YAML file.

    Raises:
        ConfigLoadError: if the file cannot be read or is not valid YAML.
        MissingEnvVarsError: if any ${ENV_VAR} references are unset (all
            collected first).
        ConfigValidationError: if the schema is violated or unit ids repeat.
    """
    raw = _read_yaml(path)
    missing = find_missing_env_vars(raw)
    if missing:
        raise MissingEnvVarsError(missing)

    config = _build_config(substitute_env_vars(raw))
    _check_unique_unit_ids(config)
    _emit_warnings(config, observer)
    observer.config_loaded(name=config.name, units_count=len(config.units))
    return config


def _read_yaml(path: Path) -> Any:
    try:
        with path.open("r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except FileNotFoundError as exc:
        raise ConfigLoadError(path, "file not found") from exc
    except OSError as exc:
        raise ConfigLoadError(path, str(exc)) from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(path, f"invalid YAML: {exc}") from exc


def _build_config(data: Any) -> PipelineConfig:
    if not isinstance(data, dict):
        raise ConfigValidationError("pipeline file must contain a mapping")
    try:
        return PipelineConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigValidationError(str(exc)) from exc


def _check_unique_unit_ids(config: PipelineConfig) -> None:
    seen: set[str] = set()
    duplicates: list[str] = []
    for unit in config.units:
        if unit.id in seen and unit.id not in duplicates:
            duplicates.append(unit.id)
        seen.add(unit.id)
    if duplicates:
        raise ConfigValidationError(f"duplicate unit ids: {', '.join(duplicates)}")


def _emit_warnings(config: PipelineConfig, observer: ConfigObserver) -> None:
    for unit in config.units:
        if unit.type not in _SCORING_UNIT_TYPES:
            continue
        temperature = unit.params.get("temperature")
        if isinstance(temperature, (int, float)) and temperature > 0.0:
            observer.config_high_temperature_warning(
                unit=unit.id, temperature=float(temperature)
            )
