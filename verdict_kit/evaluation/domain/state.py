"""State — the immutable, key-typed mapping threaded through a pipeline.

Every unit reads its inputs from a State and returns a new State carrying its
outputs. ``with_`` never touches the receiver, so any holder of an earlier
State keeps observing the values it was given.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from types import MappingProxyType

from verdict_kit.core.errors import VerdictKitError
from verdict_kit.evaluation.domain.answer import Answer
from verdict_kit.evaluation.domain.budget import BudgetReport
from verdict_kit.evaluation.domain.judge_summary import JudgeSummary
from verdict_kit.evaluation.domain.verdict import Verdict


class StateTypeError(VerdictKitError):
    """Raised when a state key is read or written with a value of the wrong type."""

    def __init__(self, key: str, expected: str, actual: str) -> None:
        super().__init__(
            f"Failed to access state key '{key}': expected {expected}, got {actual}"
        )


@dataclass(frozen=True)
class StateKey[T]:
    """A named state slot bound to the Python type its value must have.

    Sequence-valued keys declare ``item_type``; they are stored as tuples.
    """

    name: str
    value_type: type
    item_type: type | None = None

    def coerce(self, value: object) -> T:
        if self.item_type is not None:
            if not isinstance(value, (list, tuple)):
                raise StateTypeError(
                    key=self.name,
                    expected=f"sequence of {self.item_type.__name__}",
                    actual=type(value).__name__,
                )
            for item in value:
                if not isinstance(item, self.item_type):
                    raise StateTypeError(
                        key=self.name,
                        expected=f"sequence of {self.item_type.__name__}",
                        actual=f"sequence containing {type(item).__name__}",
                    )
            return tuple(value)  # type: ignore[return-value]

        if not isinstance(value, self.value_type):
            raise StateTypeError(
                key=self.name,
                expected=self.value_type.__name__,
                actual=type(value).__name__,
            )
        return value  # type: ignore[return-value]


QUESTION: StateKey[str] = StateKey("question", str)
ANSWERS: StateKey[tuple[Answer, ...]] = StateKey("answers", tuple, Answer)
REFERENCE_ANSWER: StateKey[str] = StateKey("reference_answer", str)
JUDGE_SCORES: StateKey[tuple[JudgeSummary, ...]] = StateKey(
    "judge_scores", tuple, JudgeSummary
)
VERDICT: StateKey[Verdict] = StateKey("verdict", Verdict)
BUDGET: StateKey[BudgetReport] = StateKey("budget", BudgetReport)
TRACE_LEVEL: StateKey[str] = StateKey("trace_level", str)
VERIFICATION_TRACE: StateKey[str] = StateKey("verification_trace", str)


class State:
    """Immutable mapping from StateKey to value.

    Values are pydantic frozen models, strings or tuples of frozen models, so
    a shallow copy of the backing dict is enough to keep snapshots isolated.
    """

    __slots__ = ("_data",)

    def __init__(self, data: dict[str, object] | None = None) -> None:
        self._data = MappingProxyType(dict(data or {}))

    def get[T](self, key: StateKey[T]) -> T | None:
        """Return the value bound to key, or None when the key is absent.

        Raises:
            StateTypeError: if the stored value does not have the key's type.
        """
        if key.name not in self._data:
            return None
        return key.coerce(self._data[key.name])

    def with_[T](self, key: StateKey[T], value: T) -> "State":
        """Return a new State with key bound to value; self is left unchanged."""
        data = dict(self._data)
        data[key.name] = key.coerce(value)
        return State(data)

    def contains[T](self, key: StateKey[T]) -> bool:
        return key.name in self._data

    def keys(self) -> list[str]:
        return sorted(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"State(keys={self.keys()!r})"


def new_state() -> State:
    """Return an empty State."""
    return State()
