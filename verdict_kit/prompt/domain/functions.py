"""Helper functions exposed inside every prompt template.

All helpers are total: they return a safe value instead of raising, so a
template never fails because of an unlucky argument (for example a zero
divisor).
"""

from collections.abc import Callable, Sequence


def add(a: int, b: int) -> int:
    return a + b


def sub(a: int, b: int) -> int:
    return a - b


def mul(a: int, b: int) -> int:
    return a * b


def div(a: int, b: int) -> int:
    """Integer division truncating toward zero; 0 when b is 0."""
    if b == 0:
        return 0
    quotient = abs(a) // abs(b)
    return quotient if (a >= 0) == (b >= 0) else -quotient


def mod(a: int, b: int) -> int:
    """Remainder matching ``div``: takes the sign of a; 0 when b is 0."""
    if b == 0:
        return 0
    return a - b * div(a, b)


def contains(s: str, substr: str) -> bool:
    return substr in s


def has_prefix(s: str, prefix: str) -> bool:
    return s.startswith(prefix)


def has_suffix(s: str, suffix: str) -> bool:
    return s.endswith(suffix)


def lower(s: str) -> str:
    return s.lower()


def upper(s: str) -> str:
    return s.upper()


def trim(s: str) -> str:
    return s.strip()


def replace(s: str, old: str, new: str) -> str:
    return s.replace(old, new)


def join(elems: Sequence[str], sep: str) -> str:
    return sep.join(elems)


def split(s: str, sep: str) -> list[str]:
    """Split on sep; an empty sep splits into single characters."""
    if sep == "":
        return list(s)
    return s.split(sep)


def truncate(s: str, length: int) -> str:
    """Limit s to length characters, marking the cut with an ellipsis.

    Returns "" when length <= 0 and s unchanged when it already fits. The
    ellipsis is only added when length leaves room for it (length > 3).
    """
    if length <= 0:
        return ""
    if len(s) <= length:
        return s
    if length > 3:
        return s[: length - 3] + "..."
    return s[:length]


TEMPLATE_FUNCTIONS: dict[str, Callable[..., object]] = {
    "add": add,
    "sub": sub,
    "mul": mul,
    "div": div,
    "mod": mod,
    "contains": contains,
    "hasPrefix": has_prefix,
    "hasSuffix": has_suffix,
    "lower": lower,
    "upper": upper,
    "trim": trim,
    "replace": replace,
    "join": join,
    "split": split,
    "truncate": truncate,
}
