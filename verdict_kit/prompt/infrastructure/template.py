"""PromptTemplate — Jinja2-backed prompt rendering with a fixed helper set."""

from collections.abc import Iterable, Mapping

import jinja2
from jinja2 import meta
from jinja2.sandbox import SandboxedEnvironment

from verdict_kit.prompt.domain.functions import TEMPLATE_FUNCTIONS
from verdict_kit.prompt.infrastructure.errors import (
    TemplateParseError,
    TemplateRenderError,
)


def _build_environment() -> SandboxedEnvironment:
    env = SandboxedEnvironment(
        undefined=jinja2.StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.globals.update(TEMPLATE_FUNCTIONS)
    return env


_ENVIRONMENT = _build_environment()


class PromptTemplate:
    """A prompt template compiled once and rendered many times.

    Rendering runs inside Jinja2's sandbox with StrictUndefined, so a
    reference to a variable the caller did not supply is a render error
    rather than silently empty text.
    """

    def __init__(self, name: str, source: str) -> None:
        self._name = name
        self._source = source
        try:
            ast = _ENVIRONMENT.parse(source)
            self._variables = frozenset(meta.find_undeclared_variables(ast))
            self._template = _ENVIRONMENT.from_string(source)
        except jinja2.TemplateSyntaxError as exc:
            raise TemplateParseError(
                template_name=name, reason=f"line {exc.lineno}: {exc.message}"
            ) from exc

    @property
    def name(self) -> str:
        return self._name

    @property
    def source(self) -> str:
        return self._source

    @property
    def variables(self) -> frozenset[str]:
        """Free variables the template reads, excluding helper functions."""
        return self._variables - TEMPLATE_FUNCTIONS.keys()

    def missing_variables(self, required: Iterable[str]) -> list[str]:
        """Return the required variable names the template never references."""
        return sorted(set(required) - self.variables)

    def render(self, data: Mapping[str, object]) -> str:
        """Render the template with data.

        Raises:
            TemplateRenderError: if rendering fails for any reason, including
                references to variables absent from data.
        """
        try:
            return self._template.render(**data)
        except jinja2.TemplateError as exc:
            raise TemplateRenderError(template_name=self._name, reason=str(exc)) from exc
        except (TypeError, ValueError, ArithmeticError) as exc:
            raise TemplateRenderError(template_name=self._name, reason=str(exc)) from exc
