from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, Field

from .enums import AdjustMode, ModifierKind
from .modifiers import Modifier

# ----- Rule elements (discriminated union on `key`) -----


class FlatModifierRule(BaseModel):
    """Adds a flat bonus or penalty to a statistic, e.g. Fleet: +5 untyped to land speed."""

    key: Literal["FlatModifier"] = "FlatModifier"
    selector: str
    # number, numeric string or a level formula like "@actor.level / 2"
    value: int | float | str
    type: ModifierKind | None = None
    label: str | None = None
    predicate: list[str] | None = None
    enabled: bool | None = None


class AdjustModifierRule(BaseModel):
    """Rewrites modifiers already emitted for a selector."""

    key: Literal["AdjustModifier"] = "AdjustModifier"
    selector: str
    # matches label or source, case-insensitive substring
    slug: str | None = None
    mode: AdjustMode = AdjustMode.ADD
    value: int | float | None = None
    predicate: list[str] | None = None


class BaseSpeedRule(BaseModel):
    """Sets a base speed (land, fly, swim, ...) instead of adding to one."""

    key: Literal["BaseSpeed"] = "BaseSpeed"
    selector: str = "land"
    value: int
    label: str | None = None
    predicate: list[str] | None = None


RuleElement = Annotated[
    FlatModifierRule | AdjustModifierRule | BaseSpeedRule,
    Field(discriminator="key"),
]


class RuleElementContext(BaseModel):
    source: str = ""
    level: int = 1
    abilities: dict[str, int] = Field(default_factory=dict)


class Speed(BaseModel):
    type: str
    value: int
    source: str
    predicate: list[str] | None = None


class SkippedRule(BaseModel):
    key: str
    selector: str
    reason: str


class ProcessedRuleElements(BaseModel):
    modifiers: list[Modifier] = Field(default_factory=list)
    speeds: list[Speed] = Field(default_factory=list)
    skipped: list[SkippedRule] = Field(default_factory=list)
