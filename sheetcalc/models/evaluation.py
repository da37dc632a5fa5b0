from pydantic import BaseModel, Field

from .modifiers import Modifier


class BonusBreakdown(BaseModel):
    modifier: Modifier
    applied: bool
    reason: str


class StatisticBreakdown(BaseModel):
    name: str
    base_value: int | float
    total_modifier: int | float
    final_value: int | float
    applicable_modifiers: list[Modifier] = Field(default_factory=list)
    bonuses: list[BonusBreakdown] = Field(default_factory=list)
    penalties: list[Modifier] = Field(default_factory=list)
