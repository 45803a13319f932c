"""TieBreaker policy and tied-candidate selection."""

import random
import secrets
from collections.abc import Sequence
from enum import StrEnum


class TieBreaker(StrEnum):
    """How an aggregator picks among candidates that share the best score."""

    FIRST = "first"
    RANDOM = "random"
    ERROR = "error"


class TieDetected(Exception):
    """Signals that several candidates tied under the ERROR policy.

    Aggregator units translate it into a TieError naming themselves.
    """

    def __init__(self, indices: Sequence[int]) -> None:
        self.indices = tuple(indices)
        super().__init__(f"{len(self.indices)} candidates tied")


def break_tie(indices: Sequence[int], policy: TieBreaker, secure: bool = True) -> int:
    """Return the winning index among tied indices.

    ``indices`` must be non-empty and in ascending positional order. With a
    single index there is no tie and it is returned regardless of policy.
    RANDOM draws from the OS CSPRNG when secure is set, otherwise from the
    module-level Mersenne Twister.

    Raises:
        TieDetected: if policy is ERROR and more than one index is tied.
    """
    if not indices:
        raise ValueError("break_tie needs at least one index")
    if len(indices) == 1:
        return indices[0]

    match policy:
        case TieBreaker.FIRST:
            return indices[0]
        case TieBreaker.RANDOM:
            if secure:
                return indices[secrets.randbelow(len(indices))]
            return random.choice(indices)
        case TieBreaker.ERROR:
            raise TieDetected(indices)
    raise ValueError(f"unknown tie breaker: {policy}")
