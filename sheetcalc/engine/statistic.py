from __future__ import annotations

from collections.abc import Iterable

from ..models.evaluation import StatisticBreakdown
from ..models.modifiers import Modifier, should_apply
from .stacking import Number, StackingResult, evaluate_stacking


class Statistic:
    """A single calculated value (AC, a skill, a save, speed) with modifier stacking.

    Nothing is cached: every query re-filters the modifiers against the current
    conditions and re-applies the stacking rules, so the value and the
    breakdown always come from the same state.
    """

    def __init__(self, name: str, base_value: Number = 0) -> None:
        self.name = name
        self._base_value: Number = base_value
        self._modifiers: list[Modifier] = []
        self._active_conditions: set[str] = set()

    def __repr__(self) -> str:
        return (
            f"Statistic(name={self.name!r}, base_value={self._base_value!r}, "
            f"modifiers={len(self._modifiers)})"
        )

    # ----- base value -----

    def set_base_value(self, value: Number) -> None:
        self._base_value = value

    def get_base_value(self) -> Number:
        return self._base_value

    # ----- modifiers -----

    def add_modifier(self, modifier: Modifier) -> None:
        self._modifiers.append(modifier)

    def remove_modifier(self, modifier: Modifier) -> None:
        # identity, not equality: value-equal twins stay put
        for i, m in enumerate(self._modifiers):
            if m is modifier:
                del self._modifiers[i]
                return

    def remove_modifiers_by_source(self, source: str) -> None:
        self._modifiers = [m for m in self._modifiers if m.source != source]

    def clear_modifiers(self) -> None:
        self._modifiers = []

    def get_all_modifiers(self) -> tuple[Modifier, ...]:
        """All modifiers, including ones that currently don't apply."""
        return tuple(self._modifiers)

    # ----- conditions -----

    def set_active_conditions(self, conditions: Iterable[str]) -> None:
        self._active_conditions = set(conditions)

    def add_condition(self, condition: str) -> None:
        self._active_conditions.add(condition)

    def remove_condition(self, condition: str) -> None:
        self._active_conditions.discard(condition)

    def get_active_conditions(self) -> frozenset[str]:
        return frozenset(self._active_conditions)

    # ----- evaluation -----

    def get_applicable_modifiers(self) -> list[Modifier]:
        return [m for m in self._modifiers if should_apply(m, self._active_conditions)]

    def _evaluate(self) -> tuple[list[Modifier], StackingResult]:
        applicable = self.get_applicable_modifiers()
        return applicable, evaluate_stacking(applicable)

    def get_total_modifier(self) -> Number:
        _, res = self._evaluate()
        return res.total

    def get_value(self) -> Number:
        return self._base_value + self.get_total_modifier()

    def get_breakdown(self) -> StatisticBreakdown:
        applicable, res = self._evaluate()
        return StatisticBreakdown(
            name=self.name,
            base_value=self._base_value,
            total_modifier=res.total,
            final_value=self._base_value + res.total,
            applicable_modifiers=applicable,
            bonuses=res.bonuses,
            penalties=res.penalties,
        )
