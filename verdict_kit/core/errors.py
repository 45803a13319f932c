"""Base exception class for all verdict-kit errors."""


class VerdictKitError(Exception):
    """Base class for all verdict-kit errors.

    ``retriable`` marks failures that are expected to clear on their own
    (rate limits, dropped connections, gateway errors).
    """

    def __init__(self, message: str, retriable: bool = False) -> None:
        super().__init__(message)
        self.retriable = retriable
