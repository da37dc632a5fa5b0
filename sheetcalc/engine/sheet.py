from __future__ import annotations

from collections.abc import Iterable

from ..models.evaluation import StatisticBreakdown
from ..models.modifiers import Modifier
from .stacking import Number
from .statistic import Statistic

SELECTOR_LABELS: dict[str, str] = {
    "ac": "AC",
    "speed": "Speed",
    "land-speed": "Speed",
    "fly-speed": "Fly Speed",
    "swim-speed": "Swim Speed",
    "climb-speed": "Climb Speed",
    "burrow-speed": "Burrow Speed",
    "fortitude": "Fortitude Save",
    "reflex": "Reflex Save",
    "will": "Will Save",
    "perception": "Perception",
    "initiative": "Initiative",
    "attack": "Attack Rolls",
    "damage": "Damage",
    "spell-attack": "Spell Attack",
    "spell-dc": "Spell DC",
    "hp": "Hit Points",
    "max-hp": "Max Hit Points",
    "temp-hp": "Temporary HP",
    "all-checks": "All Checks",
    "all-saves": "All Saves",
}


def selector_label(selector: str) -> str:
    if selector.startswith("skill:"):
        skill = selector[len("skill:"):]
        return skill[:1].upper() + skill[1:]
    if selector in SELECTOR_LABELS:
        return SELECTOR_LABELS[selector]
    return " ".join(part[:1].upper() + part[1:] for part in selector.split("-"))


class CharacterSheet:
    """One Statistic per selector, fed from a flat list of modifiers.

    Statistics stay independent; the sheet only routes modifiers and fans
    condition changes out to each of them.
    """

    def __init__(self) -> None:
        self._stats: dict[str, Statistic] = {}
        self._conditions: set[str] = set()
        self.unrouted: list[Modifier] = []

    def add_statistic(self, selector: str, base_value: Number = 0, name: str | None = None) -> Statistic:
        """Register the statistic for `selector`, or re-base the existing one.

        A new statistic picks up the sheet's current conditions and any
        unrouted modifiers that target its selector.
        """
        stat = self._stats.get(selector)
        if stat is not None:
            stat.set_base_value(base_value)
            if name:
                stat.name = name
            return stat

        stat = Statistic(name or selector_label(selector), base_value)
        stat.set_active_conditions(self._conditions)
        self._stats[selector] = stat
        pending = [m for m in self.unrouted if m.selector == selector]
        self.unrouted = [m for m in self.unrouted if m.selector != selector]
        for m in pending:
            stat.add_modifier(m)
        return stat

    def statistic(self, selector: str) -> Statistic | None:
        return self._stats.get(selector)

    def selectors(self) -> list[str]:
        return list(self._stats)

    def get_active_conditions(self) -> frozenset[str]:
        return frozenset(self._conditions)

    def add_modifiers(self, modifiers: Iterable[Modifier]) -> None:
        for m in modifiers:
            stat = self._stats.get(m.selector)
            if stat is None:
                self.unrouted.append(m)
            else:
                stat.add_modifier(m)

    def remove_modifiers_by_source(self, source: str) -> None:
        for stat in self._stats.values():
            stat.remove_modifiers_by_source(source)
        self.unrouted = [m for m in self.unrouted if m.source != source]

    def set_active_conditions(self, conditions: Iterable[str]) -> None:
        self._conditions = set(conditions)
        for stat in self._stats.values():
            stat.set_active_conditions(self._conditions)

    def add_condition(self, condition: str) -> None:
        self._conditions.add(condition)
        for stat in self._stats.values():
            stat.add_condition(condition)

    def remove_condition(self, condition: str) -> None:
        self._conditions.discard(condition)
        for stat in self._stats.values():
            stat.remove_condition(condition)

    def values(self) -> dict[str, Number]:
        return {sel: stat.get_value() for sel, stat in self._stats.items()}

    def breakdowns(self) -> dict[str, StatisticBreakdown]:
        return {sel: stat.get_breakdown() for sel, stat in self._stats.items()}
