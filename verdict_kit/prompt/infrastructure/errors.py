"""Error types raised by prompt template infrastructure."""

from verdict_kit.core.errors import VerdictKitError


class TemplateParseError(VerdictKitError):
    """Raised when a prompt template cannot be compiled."""

    def __init__(self, template_name: str, reason: str) -> None:
        self.template_name = template_name
        super().__init__(f"Failed to parse template '{template_name}': {reason}")


class TemplateRenderError(VerdictKitError):
    """Raised when a compiled prompt template fails while rendering."""

    def __init__(self, template_name: str, reason: str) -> None:
        self.template_name = template_name
        self.reason = reason
        super().__init__(f"Failed to render template '{template_name}': {reason}")
