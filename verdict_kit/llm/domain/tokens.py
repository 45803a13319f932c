"""Model-family heuristics: token estimates, context caps and JSON-mode support."""

CHARS_PER_TOKEN = 4

DEFAULT_CONTEXT_LIMIT = 2000

# Checked in order; the first family whose marker appears in the model id wins.
_CONTEXT_LIMITS: tuple[tuple[str, int], ...] = (
    ("gpt-4", 6000),
    ("gpt-3.5", 3000),
    ("claude", 8000),
)

_JSON_MODE_MARKERS = ("gpt", "claude")


def estimate_tokens(text: str) -> int:
    """Conservative token estimate of roughly four characters per token."""
    return len(text) // CHARS_PER_TOKEN


def context_limit_for_model(model: str) -> int:
    """Return the prompt token cap used for model.

    The caps sit well under each family's real window so the completion
    still has room.
    """
    lowered = model.lower()
    for marker, limit in _CONTEXT_LIMITS:
        if marker in lowered:
            return limit
    return DEFAULT_CONTEXT_LIMIT


def supports_json_mode(model: str) -> bool:
    """Whether model is known to honour a json_object response format."""
    lowered = model.lower()
    return any(marker in lowered for marker in _JSON_MODE_MARKERS)
