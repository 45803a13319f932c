"""Tolerant extraction of a JSON object from free-form model output."""

_JSON_FENCE = "```json"
_FENCE = "```"


def extract_json(response: str) -> str:
    """Return the text of the first JSON object found in response.

    Looks, in order, for a ```json fenced block, a generic fenced block whose
    body starts with "{", and finally the first balanced {...} span. The
    balanced scan tracks double-quoted strings and backslash escapes so braces
    inside string values do not end the object early.

    Returns "" when nothing object-shaped is found; the caller decides how to
    fail.
    """
    text = response.strip()

    fenced = _extract_json_fence(text)
    if fenced is not None:
        return fenced

    generic = _extract_generic_fence(text)
    if generic is not None:
        return generic

    return _scan_balanced_object(text)


def _extract_json_fence(text: str) -> str | None:
    start = text.find(_JSON_FENCE)
    if start == -1:
        return None
    start += len(_JSON_FENCE)
    end = text.find(_FENCE, start)
    if end == -1:
        return None
    return text[start:end].strip()


def _extract_generic_fence(text: str) -> str | None:
    start = text.find(_FENCE)
    if start == -1:
        return None
    start += len(_FENCE)
    # Skip a language tag on the opening line.
    newline = text.find("\n", start)
    if newline != -1:
        start = newline + 1
    end = text.find(_FENCE, start)
    if end == -1:
        return None
    candidate = text[start:end].strip()
    if candidate.startswith("{"):
        return candidate
    return None


def _scan_balanced_object(text: str) -> str:
    start = text.find("{")
    if start == -1:
        return ""

    depth = 0
    in_string = False
    escape_next = False
    for index in range(start, len(text)):
        char = text[index]
        if escape_next:
            escape_next = False
            continue
        if char == "\\":
            escape_next = True
            continue
        if char == '"':
            in_string = not in_string
            continue
        if in_string:
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    return ""
