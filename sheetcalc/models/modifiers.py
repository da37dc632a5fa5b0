from __future__ import annotations

from collections.abc import Collection

from pydantic import BaseModel, ConfigDict, Field, FiniteFloat

from .enums import ModifierKind


class Modifier(BaseModel):
    """A single bonus or penalty from a feat, spell, item or condition."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str
    source: str
    value: int | FiniteFloat
    kind: ModifierKind = Field(default=ModifierKind.UNTYPED, alias="type")
    selector: str = ""
    # None or empty = always active
    predicate: tuple[str, ...] | None = None
    enabled: bool = True
    description: str | None = None

    @property
    def is_bonus(self) -> bool:
        return is_bonus(self)

    @property
    def is_penalty(self) -> bool:
        return is_penalty(self)


def is_bonus(m: Modifier) -> bool:
    return m.value > 0


def is_penalty(m: Modifier) -> bool:
    return m.value < 0


def should_apply(m: Modifier, active_conditions: Collection[str]) -> bool:
    """True when the modifier is enabled and every predicate tag is active (AND only)."""
    if not m.enabled:
        return False
    if not m.predicate:
        return True
    return all(tag in active_conditions for tag in m.predicate)
