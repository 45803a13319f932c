"""BudgetGuardUnit — enforces per-run token and call ceilings around another unit."""

from collections.abc import Mapping
from typing import NoReturn, Self

from verdict_kit.config.domain.wrappers import BudgetLimits
from verdict_kit.config.infrastructure.map_loader import (
    load_unit_config,
    validate_unit_config,
)
from verdict_kit.evaluation.domain.budget import BudgetReport
from verdict_kit.evaluation.domain.state import BUDGET, State
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.domain.unit import Unit
from verdict_kit.unit.infrastructure.errors import BudgetExceededError
from verdict_kit.unit.infrastructure.lifecycle import (
    observed_execution,
    require_unit_name,
)
from verdict_kit.unit.infrastructure.tracing import unit_span

UNIT_TYPE = "budget_guard"


class BudgetGuardUnit:
    """Checks the run's BudgetReport against limits before and after the wrapped unit.

    The check after execution catches usage recorded by the wrapped unit
    itself. An absent ``budget`` key counts as zero usage. The guard keeps no
    state of its own: usage lives in the State, so one guard can serve
    concurrent runs. Satisfies the Unit protocol structurally.
    """

    def __init__(
        self, name: str, wrapped: Unit, limits: BudgetLimits, observer: UnitObserver
    ) -> None:
        self._name = require_unit_name(name)
        self._wrapped = wrapped
        self._limits = validate_unit_config(BudgetLimits, limits)
        self._observer = observer

    @classmethod
    def from_mapping(
        cls,
        name: str,
        params: Mapping[str, object],
        wrapped: Unit,
        observer: UnitObserver,
    ) -> Self:
        return cls(
            name=name,
            wrapped=wrapped,
            limits=load_unit_config(BudgetLimits, params),
            observer=observer,
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def wrapped(self) -> Unit:
        return self._wrapped

    @property
    def limits(self) -> BudgetLimits:
        return self._limits

    def validate(self) -> None:
        validate_unit_config(BudgetLimits, self._limits)
        self._wrapped.validate()

    def reconfigure(self, params: Mapping[str, object]) -> Self:
        limits = load_unit_config(BudgetLimits, params, base=self._limits)
        return type(self)(
            name=self._name, wrapped=self._wrapped, limits=limits, observer=self._observer
        )

    def check(self, usage: BudgetReport) -> None:
        """Raise if usage is over either limit.

        Raises:
            BudgetExceededError: naming the wrapped unit and the limit crossed.
        """
        if self._limits.max_tokens and usage.tokens_used > self._limits.max_tokens:
            self._exceeded("tokens", self._limits.max_tokens, usage.tokens_used)
        if self._limits.max_calls and usage.calls_made > self._limits.max_calls:
            self._exceeded("calls", self._limits.max_calls, usage.calls_made)

    def _exceeded(self, limit_type: str, limit: int, used: int) -> NoReturn:
        self._observer.budget_exceeded(
            unit=self._wrapped.name, limit_type=limit_type, limit=limit, used=used
        )
        raise BudgetExceededError(
            unit=self._wrapped.name, limit_type=limit_type, limit=limit, used=used
        )

    async def execute(self, state: State) -> State:
        """Run the wrapped unit if usage is within limits, then re-check.

        Raises:
            BudgetExceededError: if usage is over a limit before or after.
            And anything the wrapped unit raises.
        """
        attributes = {
            "wrapped_unit.name": self._wrapped.name,
            "budget.max_tokens": self._limits.max_tokens,
            "budget.max_calls": self._limits.max_calls,
        }
        with (
            observed_execution(self._observer, self._name, UNIT_TYPE),
            unit_span("BudgetGuardUnit.execute", UNIT_TYPE, self._name, attributes) as span,
        ):
            before = state.get(BUDGET) or BudgetReport()
            span.set_attribute("budget.tokens_used", before.tokens_used)
            span.set_attribute("budget.calls_made", before.calls_made)
            self.check(before)

            result = await self._wrapped.execute(state)

            after = result.get(BUDGET) or BudgetReport()
            span.set_attribute("budget.tokens_used", after.tokens_used)
            span.set_attribute("budget.calls_made", after.calls_made)
            self.check(after)
            return result
