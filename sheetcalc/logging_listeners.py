from __future__ import annotations

import logging
import os

from .events import StatisticEvaluated, event_bus

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

logger = logging.getLogger("sheetcalc.evaluations")

_registered = False


def _on_statistic_evaluated(ev: StatisticEvaluated) -> None:
    logger.info(
        "%s: base=%s total_modifier=%s final=%s (applied=%d suppressed=%d penalties=%d)",
        ev.name,
        ev.base_value,
        ev.total_modifier,
        ev.final_value,
        ev.applied_count,
        ev.suppressed_count,
        ev.penalty_count,
    )


def register_listeners() -> None:
    global _registered
    if _registered:
        return
    logging.getLogger("sheetcalc").setLevel(LOG_LEVEL)
    event_bus.subscribe(StatisticEvaluated, _on_statistic_evaluated)
    _registered = True
