"""Modifier stacking rules.

1. Bonuses of the same kind don't stack, only the highest applies
   (status, circumstance and item bonuses each form their own group).
2. Untyped bonuses always stack.
3. All penalties stack, whatever their kind.
4. Bonuses and penalties coexist and offset each other.

Modifiers are compared by identity wherever a result has to point back at a
specific instance: two value-equal modifiers are still two modifiers.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models.enums import ModifierKind
from ..models.evaluation import BonusBreakdown
from ..models.modifiers import Modifier, is_bonus, is_penalty

Number = int | float


@dataclass
class StackingResult:
    bonus_total: Number = 0
    penalty_total: Number = 0
    bonuses: list[BonusBreakdown] = field(default_factory=list)
    penalties: list[Modifier] = field(default_factory=list)

    @property
    def total(self) -> Number:
        return self.bonus_total + self.penalty_total


def group_by_kind(modifiers: Sequence[Modifier]) -> dict[ModifierKind, list[Modifier]]:
    grouped: dict[ModifierKind, list[Modifier]] = {}
    for m in modifiers:
        grouped.setdefault(m.kind, []).append(m)
    return grouped


def highest_value(modifiers: Sequence[Modifier]) -> Number:
    if not modifiers:
        return 0
    return max(m.value for m in modifiers)


def lowest_value(modifiers: Sequence[Modifier]) -> Number:
    if not modifiers:
        return 0
    return min(m.value for m in modifiers)


def sum_modifiers(modifiers: Sequence[Modifier]) -> Number:
    return sum((m.value for m in modifiers), 0)


def calculate_bonuses(bonuses: Sequence[Modifier]) -> Number:
    total: Number = 0
    for kind, mods in group_by_kind(bonuses).items():
        if kind == ModifierKind.UNTYPED:
            total += sum_modifiers(mods)
        else:
            total += highest_value(mods)
    return total


def calculate_penalties(penalties: Sequence[Modifier]) -> Number:
    return sum_modifiers(penalties)


def apply_stacking_rules(modifiers: Sequence[Modifier]) -> Number:
    """Total of an already-filtered list of modifiers."""
    bonuses = [m for m in modifiers if is_bonus(m)]
    penalties = [m for m in modifiers if is_penalty(m)]
    return calculate_bonuses(bonuses) + calculate_penalties(penalties)


def applied_bonuses(bonuses: Sequence[Modifier]) -> list[Modifier]:
    """Bonuses that survive stacking; ties at a group's maximum all survive."""
    applied: list[Modifier] = []
    for kind, mods in group_by_kind(bonuses).items():
        if kind == ModifierKind.UNTYPED:
            applied.extend(mods)
        else:
            top = highest_value(mods)
            applied.extend(m for m in mods if m.value == top)
    return applied


def apply_modifier_stacking(modifiers: Sequence[Modifier]) -> list[Modifier]:
    if not modifiers:
        return []
    bonuses = [m for m in modifiers if is_bonus(m)]
    penalties = [m for m in modifiers if is_penalty(m)]
    return applied_bonuses(bonuses) + penalties


def would_stack(new: Modifier, existing: Sequence[Modifier]) -> bool:
    """Whether adding `new` would change the total on top of `existing`."""
    if is_penalty(new):
        return True
    if new.kind == ModifierKind.UNTYPED:
        return True
    same_kind = [m for m in existing if is_bonus(m) and m.kind == new.kind]
    if not same_kind:
        return True
    return new.value > highest_value(same_kind)


def _suppressed_reason(kind: ModifierKind, winner: Modifier) -> str:
    return f"Suppressed by higher {kind.value} bonus from {winner.source}"


def stacking_explanation(modifier: Modifier, all_modifiers: Sequence[Modifier]) -> str:
    """Human-readable reason a modifier is or isn't counted."""
    if is_penalty(modifier):
        return "All penalties stack"
    if modifier.kind == ModifierKind.UNTYPED:
        return "Untyped bonuses stack"

    kind = modifier.kind.value
    others = [
        m
        for m in all_modifiers
        if m is not modifier and is_bonus(m) and m.kind == modifier.kind
    ]
    if not others:
        return f"Only {kind} bonus"

    top = highest_value([*others, modifier])
    if modifier.value == top:
        return f"Highest {kind} bonus"
    winner = next(m for m in others if m.value == top)
    return _suppressed_reason(modifier.kind, winner)


def evaluate_stacking(modifiers: Sequence[Modifier]) -> StackingResult:
    """Totals plus per-bonus report for an already-filtered list of modifiers.

    Bonus entries are grouped by kind, in order of each kind's first
    appearance, and keep insertion order within a kind.
    """
    res = StackingResult()
    bonuses = [m for m in modifiers if is_bonus(m)]
    res.penalties = [m for m in modifiers if is_penalty(m)]
    res.penalty_total = calculate_penalties(res.penalties)

    for kind, mods in group_by_kind(bonuses).items():
        if kind == ModifierKind.UNTYPED:
            res.bonus_total += sum_modifiers(mods)
            res.bonuses.extend(
                BonusBreakdown(modifier=m, applied=True, reason="Untyped bonuses stack")
                for m in mods
            )
            continue

        top = highest_value(mods)
        res.bonus_total += top
        winner = next(m for m in mods if m.value == top)
        for m in mods:
            if m.value != top:
                reason = _suppressed_reason(kind, winner)
            elif len(mods) == 1:
                reason = f"Only {kind.value} bonus"
            else:
                reason = f"Highest {kind.value} bonus"
            res.bonuses.append(
                BonusBreakdown(modifier=m, applied=m.value == top, reason=reason)
            )
    return res
