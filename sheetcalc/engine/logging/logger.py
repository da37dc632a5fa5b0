from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ...models.evaluation import StatisticBreakdown

from ...events import StatisticEvaluated, event_bus


def log_evaluation(breakdown: StatisticBreakdown) -> None:
    applied = sum(1 for b in breakdown.bonuses if b.applied)
    event_bus.emit(
        StatisticEvaluated(
            name=breakdown.name,
            base_value=breakdown.base_value,
            total_modifier=breakdown.total_modifier,
            final_value=breakdown.final_value,
            applied_count=applied,
            suppressed_count=len(breakdown.bonuses) - applied,
            penalty_count=len(breakdown.penalties),
        )
    )
