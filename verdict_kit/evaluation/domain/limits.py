"""Input bounds shared by every unit that accepts candidate answers."""

MAX_ANSWERS = 10_000
MAX_CONTENT_BYTES = 10 * 1024 * 1024


def content_size(text: str) -> int:
    """Size of text in UTF-8 bytes, the unit MAX_CONTENT_BYTES is measured in."""
    return len(text.encode("utf-8"))
