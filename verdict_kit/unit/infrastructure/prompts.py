"""Compiling and rendering unit prompt templates with unit-level errors."""

from collections.abc import Iterable, Mapping

from verdict_kit.config.infrastructure.errors import ConfigValidationError
from verdict_kit.prompt.infrastructure.errors import (
    TemplateParseError,
    TemplateRenderError,
)
from verdict_kit.prompt.infrastructure.template import PromptTemplate
from verdict_kit.unit.infrastructure.errors import TemplateExecutionError


def compile_unit_template(
    unit: str, field: str, source: str, required: Iterable[str]
) -> PromptTemplate:
    """Compile source and check it reads every required variable.

    Raises:
        ConfigValidationError: if source does not parse or never references
            one of the required variables.
    """
    try:
        template = PromptTemplate(name=f"{unit}.{field}", source=source)
    except TemplateParseError as exc:
        raise ConfigValidationError(f"unit '{unit}': {field}: {exc}") from exc

    missing = template.missing_variables(required)
    if missing:
        raise ConfigValidationError(
            f"unit '{unit}': {field} must reference {', '.join(missing)}"
        )
    return template


def render_unit_template(
    unit: str, template: PromptTemplate, data: Mapping[str, object]
) -> str:
    """Render template, turning render failures into TemplateExecutionError."""
    try:
        return template.render(data)
    except TemplateRenderError as exc:
        raise TemplateExecutionError(unit=unit, reason=exc.reason) from exc
