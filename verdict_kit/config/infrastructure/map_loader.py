"""Normalises untyped parameter maps into validated unit configs."""

from collections.abc import Mapping

import yaml
from pydantic import BaseModel, ValidationError
from pydantic_core import to_jsonable_python

from verdict_kit.config.infrastructure.errors import ConfigValidationError


def load_unit_config[C: BaseModel](
    config_type: type[C],
    params: Mapping[str, object] | None,
    base: C | None = None,
) -> C:
    """Build a config_type from an untyped map.

    params is written out as YAML and read back so that whatever shape it
    came in (nested mappings, enum members, durations) reaches the model as
    plain YAML data. The result is overlaid on base, or on config_type's own
    defaults, and validated by the same model the typed path uses. Numeric
    strings such as "0.5" are accepted for numeric fields.

    Raises:
        ConfigValidationError: if params cannot be serialised, is not a
            mapping, or fails validation.
    """
    try:
        text = yaml.safe_dump(to_jsonable_python(dict(params or {})))
        user_values = yaml.safe_load(text)
    except (yaml.YAMLError, TypeError, ValueError) as exc:
        raise ConfigValidationError(f"unit parameters are not serialisable: {exc}") from exc

    if user_values is None:
        user_values = {}
    if not isinstance(user_values, dict):
        raise ConfigValidationError(
            f"unit parameters must be a mapping, got {type(user_values).__name__}"
        )

    defaults = (base if base is not None else config_type()).model_dump(mode="json")
    try:
        return config_type.model_validate({**defaults, **user_values})
    except ValidationError as exc:
        raise ConfigValidationError(describe_validation_error(exc)) from exc


def validate_unit_config[C: BaseModel](config_type: type[C], config: C) -> C:
    """Re-run config_type's validators over an already-built config.

    Raises:
        ConfigValidationError: if any field is out of range.
    """
    try:
        return config_type.model_validate(config.model_dump())
    except ValidationError as exc:
        raise ConfigValidationError(describe_validation_error(exc)) from exc


def describe_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)
