"""UnitRegistry — maps unit type names to the factories that build them."""

from collections.abc import Callable, Iterable, Mapping

from pydantic import ValidationError

from verdict_kit.aggregator.domain.reducers import (
    MaxReducer,
    MeanReducer,
    MedianReducer,
    ScoreReducer,
)
from verdict_kit.aggregator.infrastructure.pool import PoolAggregatorUnit
from verdict_kit.answerer.infrastructure.answerer import AnswererUnit
from verdict_kit.config.domain.pipeline import UnitSpec
from verdict_kit.config.domain.wrappers import WrappedUnitParams
from verdict_kit.config.infrastructure.errors import (
    ConfigValidationError,
    UnknownUnitTypeError,
)
from verdict_kit.config.infrastructure.map_loader import describe_validation_error
from verdict_kit.judge.infrastructure.position_swap import PositionSwapUnit
from verdict_kit.judge.infrastructure.score_judge import ScoreJudgeUnit
from verdict_kit.llm.domain.client import LLMClient
from verdict_kit.matcher.infrastructure.exact import ExactMatchUnit
from verdict_kit.matcher.infrastructure.fuzzy import FuzzyMatchUnit
from verdict_kit.unit.domain.observer import UnitObserver
from verdict_kit.unit.domain.unit import Unit
from verdict_kit.unit.infrastructure.budget_guard import BudgetGuardUnit
from verdict_kit.verifier.infrastructure.verifier import VerifierUnit

type UnitFactory = Callable[
    [str, Mapping[str, object], LLMClient | None, UnitObserver], Unit
]


class UnitRegistry:
    """Builds units by type name from untyped parameter maps.

    Every unit built through one registry call shares the LLM client and
    observer passed to that call.
    """

    def __init__(self) -> None:
        self._factories: dict[str, UnitFactory] = {}

    def register(self, unit_type: str, factory: UnitFactory) -> None:
        """Register factory under unit_type.

        Raises:
            ConfigValidationError: if unit_type is empty or already registered.
        """
        if not unit_type:
            raise ConfigValidationError("unit type cannot be empty")
        if unit_type in self._factories:
            raise ConfigValidationError(f"unit type '{unit_type}' is already registered")
        self._factories[unit_type] = factory

    def types(self) -> list[str]:
        return sorted(self._factories)

    def __contains__(self, unit_type: object) -> bool:
        return unit_type in self._factories

    def create(
        self,
        unit_type: str,
        name: str,
        params: Mapping[str, object],
        llm_client: LLMClient | None,
        observer: UnitObserver,
    ) -> Unit:
        """Build one unit.

        Raises:
            UnknownUnitTypeError: if unit_type is not registered.
            ConfigValidationError: if params are invalid for that unit.
        """
        factory = self._factories.get(unit_type)
        if factory is None:
            raise UnknownUnitTypeError(unit_type=unit_type, known_types=self._factories)
        return factory(name, params, llm_client, observer)

    def build(
        self,
        specs: Iterable[UnitSpec],
        llm_client: LLMClient | None,
        observer: UnitObserver,
    ) -> list[Unit]:
        """Build a unit for each spec, in order."""
        return [
            self.create(
                unit_type=spec.type,
                name=spec.id,
                params=spec.params,
                llm_client=llm_client,
                observer=observer,
            )
            for spec in specs
        ]


def _require_client(unit_type: str, name: str, llm_client: LLMClient | None) -> LLMClient:
    if llm_client is None:
        raise ConfigValidationError(
            f"unit '{name}' of type '{unit_type}' requires an LLM client"
        )
    return llm_client


def _answerer(
    name: str,
    params: Mapping[str, object],
    llm_client: LLMClient | None,
    observer: UnitObserver,
) -> Unit:
    return AnswererUnit.from_mapping(
        name=name,
        params=params,
        llm_client=_require_client("answerer", name, llm_client),
        observer=observer,
    )


def _score_judge(
    name: str,
    params: Mapping[str, object],
    llm_client: LLMClient | None,
    observer: UnitObserver,
) -> Unit:
    return ScoreJudgeUnit.from_mapping(
        name=name,
        params=params,
        llm_client=_require_client("score_judge", name, llm_client),
        observer=observer,
    )


def _verification(
    name: str,
    params: Mapping[str, object],
    llm_client: LLMClient | None,
    observer: UnitObserver,
) -> Unit:
    return VerifierUnit.from_mapping(
        name=name,
        params=params,
        llm_client=_require_client("verification", name, llm_client),
        observer=observer,
    )


def _exact_match(
    name: str,
    params: Mapping[str, object],
    llm_client: LLMClient | None,
    observer: UnitObserver,
) -> Unit:
    return ExactMatchUnit.from_mapping(name=name, params=params, observer=observer)


def _fuzzy_match(
    name: str,
    params: Mapping[str, object],
    llm_client: LLMClient | None,
    observer: UnitObserver,
) -> Unit:
    return FuzzyMatchUnit.from_mapping(name=name, params=params, observer=observer)


def _pool(unit_type: str, reducer: ScoreReducer) -> UnitFactory:
    def factory(
        name: str,
        params: Mapping[str, object],
        llm_client: LLMClient | None,
        observer: UnitObserver,
    ) -> Unit:
        return PoolAggregatorUnit.from_mapping(
            name=name,
            params=params,
            observer=observer,
            reducer=reducer,
            unit_type=unit_type,
        )

    return factory


def _split_wrapped(
    unit_type: str, name: str, params: Mapping[str, object]
) -> tuple[UnitSpec, dict[str, object]]:
    """Separate the wrapped_unit declaration from the wrapper's own params.

    Raises:
        ConfigValidationError: if wrapped_unit is missing or malformed.
    """
    try:
        declared = WrappedUnitParams.model_validate(
            {"wrapped_unit": params.get("wrapped_unit")}
        )
    except ValidationError as exc:
        raise ConfigValidationError(
            f"unit '{name}' of type '{unit_type}' needs a valid "
            f"'wrapped_unit': {describe_validation_error(exc)}"
        ) from exc
    own_params = {key: value for key, value in params.items() if key != "wrapped_unit"}
    return declared.wrapped_unit, own_params


def _position_swap(registry: UnitRegistry) -> UnitFactory:
    def factory(
        name: str,
        params: Mapping[str, object],
        llm_client: LLMClient | None,
        observer: UnitObserver,
    ) -> Unit:
        spec, own_params = _split_wrapped("position_swap_wrapper", name, params)
        if own_params:
            raise ConfigValidationError(
                f"unit '{name}' of type 'position_swap_wrapper' takes only "
                f"'wrapped_unit', got: {', '.join(sorted(own_params))}"
            )
        wrapped = registry.create(spec.type, spec.id, spec.params, llm_client, observer)
        return PositionSwapUnit(name=name, wrapped=wrapped, observer=observer)

    return factory


def _budget_guard(registry: UnitRegistry) -> UnitFactory:
    def factory(
        name: str,
        params: Mapping[str, object],
        llm_client: LLMClient | None,
        observer: UnitObserver,
    ) -> Unit:
        spec, own_params = _split_wrapped("budget_guard", name, params)
        wrapped = registry.create(spec.type, spec.id, spec.params, llm_client, observer)
        return BudgetGuardUnit.from_mapping(
            name=name, params=own_params, wrapped=wrapped, observer=observer
        )

    return factory


def default_registry() -> UnitRegistry:
    """Return a registry holding every built-in unit type."""
    registry = UnitRegistry()
    registry.register("answerer", _answerer)
    registry.register("score_judge", _score_judge)
    registry.register("verification", _verification)
    registry.register("exact_match", _exact_match)
    registry.register("fuzzy_match", _fuzzy_match)
    registry.register("max_pool", _pool("max_pool", MaxReducer()))
    registry.register("mean_pool", _pool("mean_pool", MeanReducer()))
    registry.register("arithmetic_mean", _pool("arithmetic_mean", MeanReducer()))
    registry.register("median_pool", _pool("median_pool", MedianReducer()))
    registry.register("position_swap_wrapper", _position_swap(registry))
    registry.register("budget_guard", _budget_guard(registry))
    return registry
