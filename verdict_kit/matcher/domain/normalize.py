"""String normalisation and Levenshtein similarity used by the matchers.

Everything here operates on Python str, i.e. on code points, so a multi-byte
UTF-8 character is a single edit unit.
"""


def fold_case(text: str) -> str:
    """Full Unicode case folding ("ß" folds to "ss"), not plain lowercasing."""
    return text.casefold()


def trim(text: str) -> str:
    return text.strip()


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character insertions, deletions and substitutions.

    Bit-parallel (Myers/Hyyrö) evaluation of the edit-distance matrix: each
    column of the matrix is held as two bit vectors of vertical deltas over
    the shorter string, so one character of the longer string costs a fixed
    handful of integer operations instead of a full row of cell updates.
    """
    if a == b:
        return 0
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    pattern_masks: dict[str, int] = {}
    for index, char in enumerate(b):
        pattern_masks[char] = pattern_masks.get(char, 0) | (1 << index)

    full = (1 << len(b)) - 1
    last = 1 << (len(b) - 1)
    positive = full
    negative = 0
    distance = len(b)
    for char in a:
        match = pattern_masks.get(char, 0)
        diagonal = ((((match & positive) + positive) ^ positive) | match | negative) & full
        horizontal_pos = negative | ~(diagonal | positive)
        horizontal_neg = positive & diagonal
        if horizontal_pos & last:
            distance += 1
        elif horizontal_neg & last:
            distance -= 1
        # Row 0 grows by one per column, hence the carried-in 1.
        horizontal_pos = (horizontal_pos << 1) | 1
        horizontal_neg <<= 1
        positive = (horizontal_neg | ~(diagonal | horizontal_pos)) & full
        negative = horizontal_pos & diagonal & full
    return distance


def levenshtein_similarity(a: str, b: str) -> float:
    """1 - distance / longest length, in [0, 1]; two empty strings score 1.0."""
    if a == b:
        return 1.0
    longest = max(len(a), len(b))
    similarity = 1.0 - levenshtein_distance(a, b) / longest
    return max(similarity, 0.0)
