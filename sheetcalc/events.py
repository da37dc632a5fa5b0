from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .engine.stacking import Number


@dataclass(frozen=True)
class StatisticEvaluated:
    """Published once per breakdown handed back to a caller."""

    name: str
    base_value: Number
    total_modifier: Number
    final_value: Number
    applied_count: int
    suppressed_count: int
    penalty_count: int


Handler = Callable[[Any], None]


class EventBus:
    """Synchronous publish/subscribe keyed on the exact event class."""

    def __init__(self) -> None:
        self._handlers: defaultdict[type, list[Handler]] = defaultdict(list)

    def subscribe(self, event_type: type, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def unsubscribe(self, event_type: type, handler: Handler) -> None:
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event_type: type) -> tuple[Handler, ...]:
        return tuple(self._handlers.get(event_type, ()))

    def emit(self, event: object) -> None:
        # snapshot so a handler may unsubscribe itself; handler errors propagate
        for handler in self.handlers_for(type(event)):
            handler(event)


event_bus = EventBus()
