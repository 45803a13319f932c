"""Error types raised by LLM client infrastructure."""

from verdict_kit.core.errors import VerdictKitError


class LLMInvocationError(VerdictKitError):
    """Raised when the completion backend fails or returns no usable text."""

    def __init__(self, model: str, reason: str, retriable: bool = False) -> None:
        self.model = model
        self.reason = reason
        super().__init__(
            f"Failed to complete prompt with model '{model}': {reason}",
            retriable=retriable,
        )
