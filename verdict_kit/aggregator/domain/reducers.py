"""Score reducers: the max, mean and median statistics behind the pool aggregators.

A reducer turns a non-empty vector of finite scores into the aggregate score
and the positional indices of the candidates tied for the win. Picking among
those indices, and the minimum-score check, are left to the caller so every
aggregator applies them in the same order.
"""

import math
import statistics
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True)
class Reduction:
    aggregate: float
    statistic: str
    candidates: tuple[int, ...]
    tie_detail: str


class ScoreReducer(Protocol):
    """Structural interface for a score statistic.

    ``secure_random`` selects the randomness source used when ties are
    broken at random.
    """

    @property
    def secure_random(self) -> bool: ...

    def reduce(self, scores: Sequence[float]) -> Reduction: ...


def _indices_of_max(scores: Sequence[float]) -> tuple[float, tuple[int, ...]]:
    best = -math.inf
    indices: list[int] = []
    for index, score in enumerate(scores):
        if score > best:
            best = score
            indices = [index]
        elif score == best:
            indices.append(index)
    return best, tuple(indices)


class MaxReducer:
    """Aggregate is the highest score; the winner is the candidate holding it."""

    secure_random = True

    def reduce(self, scores: Sequence[float]) -> Reduction:
        best, indices = _indices_of_max(scores)
        return Reduction(
            aggregate=best,
            statistic="highest",
            candidates=indices,
            tie_detail=f"{len(indices)} answers with score {best:.3f}",
        )


class MeanReducer:
    """Aggregate is the arithmetic mean; the winner is the highest-scoring candidate.

    The minimum-score check applies to the mean, not to the winner's score.
    """

    secure_random = True

    def reduce(self, scores: Sequence[float]) -> Reduction:
        # Exact rational summation: no drift at a threshold, no overflow on huge scores.
        mean = statistics.mean(scores)
        best, indices = _indices_of_max(scores)
        return Reduction(
            aggregate=mean,
            statistic="mean",
            candidates=indices,
            tie_detail=f"{len(indices)} answers with score {best:.3f}",
        )


def median(scores: Sequence[float]) -> float:
    """Middle value, or the mean of the two middle values for an even count."""
    ordered = sorted(scores)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return ordered[middle]
    low, high = ordered[middle - 1], ordered[middle]
    return low / 2 + high / 2


class MedianReducer:
    """Aggregate is the median; the winner is the candidate closest to it.

    Random tie-breaks here only need to be fair, so they use the fast PRNG.
    """

    secure_random = False

    def reduce(self, scores: Sequence[float]) -> Reduction:
        centre = median(scores)
        best_distance = math.inf
        indices: list[int] = []
        for index, score in enumerate(scores):
            distance = abs(score - centre)
            if distance < best_distance:
                best_distance = distance
                indices = [index]
            elif distance == best_distance:
                indices.append(index)
        return Reduction(
            aggregate=centre,
            statistic="median",
            candidates=tuple(indices),
            tie_detail=(
                f"{len(indices)} answers with distance {best_distance:.3f} "
                f"from median {centre:.3f} (tied candidates: {list(indices)})"
            ),
        )
