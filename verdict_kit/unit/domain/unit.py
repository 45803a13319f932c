"""Unit Protocol — the contract shared by every pipeline step."""

from collections.abc import Mapping
from typing import Protocol, Self

from verdict_kit.evaluation.domain.state import State


class Unit(Protocol):
    """Structural interface satisfied by every unit.

    Units are immutable once built. ``execute`` never mutates the state it is
    given; on failure it raises and the caller still holds the original state.
    """

    @property
    def name(self) -> str: ...

    async def execute(self, state: State) -> State: ...

    def validate(self) -> None: ...

    def reconfigure(self, params: Mapping[str, object]) -> Self: ...
