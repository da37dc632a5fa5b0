from __future__ import annotations

from pydantic import BaseModel, Field

from .evaluation import StatisticBreakdown
from .modifiers import Modifier
from .rule_elements import RuleElement

# ----- Statistics -----


class StatisticSpec(BaseModel):
    selector: str
    base_value: int | float = 0
    # display name; defaults to a label derived from the selector
    name: str | None = None


class EvaluateRequest(BaseModel):
    statistics: list[StatisticSpec]
    modifiers: list[Modifier] = Field(default_factory=list)
    conditions: list[str] = Field(default_factory=list)
    # sources retracted before evaluating (deselected feats, dropped spells)
    removed_sources: list[str] = Field(default_factory=list)


class EvaluateResponse(BaseModel):
    statistics: dict[str, StatisticBreakdown]
    unrouted: list[Modifier] = Field(default_factory=list)


# ----- Rule elements -----


class ProcessRuleElementsRequest(BaseModel):
    source: str
    level: int = 1
    abilities: dict[str, int] = Field(default_factory=dict)
    rules: list[RuleElement] = Field(default_factory=list)
