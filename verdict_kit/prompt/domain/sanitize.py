"""Neutralising user-originated text before it is embedded in a prompt."""

_FENCE = "```"
_NEUTRAL_FENCE = "'''"


def sanitize_user_content(content: str) -> str:
    """Wrap content in a fresh fenced block it cannot break out of.

    Any fence already present in content is rewritten to triple apostrophes,
    so the only fences in the result are the two added here.
    """
    escaped = content.replace(_FENCE, _NEUTRAL_FENCE)
    return f"{_FENCE}\n{escaped}\n{_FENCE}\n"
