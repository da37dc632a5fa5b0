from __future__ import annotations

import logging
import math
import re
from collections.abc import Collection, Sequence

from ..models.enums import AdjustMode, ModifierKind
from ..models.modifiers import Modifier
from ..models.rule_elements import (
    AdjustModifierRule,
    BaseSpeedRule,
    FlatModifierRule,
    ProcessedRuleElements,
    RuleElement,
    RuleElementContext,
    SkippedRule,
    Speed,
)

logger = logging.getLogger(__name__)

_LEVEL_TIMES = re.compile(r"^@actor\.level\s*\*\s*(\d+)$")
_LEVEL_DIV = re.compile(r"^@actor\.level\s*/\s*(\d+)$")


def resolve_value(value: int | float | str, ctx: RuleElementContext) -> int | float | None:
    """Resolve a literal or a simple level formula; None if it can't be parsed."""
    if isinstance(value, (int, float)):
        return value
    text = value.strip()
    if text == "@actor.level":
        return ctx.level
    m = _LEVEL_TIMES.match(text)
    if m:
        return ctx.level * int(m.group(1))
    m = _LEVEL_DIV.match(text)
    if m:
        divisor = int(m.group(1))
        if divisor == 0:
            logger.warning("Division by zero in rule value %r (source=%s)", value, ctx.source)
            return None
        return ctx.level // divisor
    try:
        parsed = float(text)
    except ValueError:
        logger.warning("Unable to resolve rule value %r (source=%s)", value, ctx.source)
        return None
    if not math.isfinite(parsed):
        logger.warning("Non-finite rule value %r (source=%s)", value, ctx.source)
        return None
    return int(parsed) if parsed.is_integer() else parsed


def generate_label(selector: str, value: int | float) -> str:
    sign = "+" if value >= 0 else ""
    words = " ".join(part[:1].upper() + part[1:] for part in selector.split("-"))
    return f"{sign}{value} {words}"


def process_flat_modifier(rule: FlatModifierRule, ctx: RuleElementContext) -> Modifier | None:
    value = resolve_value(rule.value, ctx)
    if value is None:
        return None
    return Modifier(
        label=rule.label or generate_label(rule.selector, value),
        source=ctx.source,
        value=value,
        kind=rule.type or ModifierKind.UNTYPED,
        selector=rule.selector,
        predicate=tuple(rule.predicate) if rule.predicate is not None else None,
        enabled=True if rule.enabled is None else rule.enabled,
    )


def should_apply_adjustment(rule: AdjustModifierRule, active_conditions: Collection[str]) -> bool:
    if not rule.predicate:
        return True
    return all(tag in active_conditions for tag in rule.predicate)


def _adjusted_value(current: int | float, rule: AdjustModifierRule) -> int | float:
    amount = rule.value if rule.value is not None else 0
    if rule.mode == AdjustMode.ADD:
        return current + amount
    if rule.mode == AdjustMode.MULTIPLY:
        return current * amount
    if rule.mode == AdjustMode.OVERRIDE:
        return amount
    if rule.mode == AdjustMode.UPGRADE:
        return max(current, amount)
    return min(current, amount)


def process_adjust_modifier(
    rule: AdjustModifierRule, existing: Sequence[Modifier]
) -> list[Modifier]:
    """Return `existing` with matching modifiers replaced by adjusted copies."""
    slug = rule.slug.lower() if rule.slug else None

    def matches(m: Modifier) -> bool:
        if m.selector != rule.selector:
            return False
        if slug is None:
            return True
        return slug in m.label.lower() or slug in m.source.lower()

    out: list[Modifier] = []
    for m in existing:
        if matches(m):
            m = m.model_copy(
                update={
                    "value": _adjusted_value(m.value, rule),
                    "source": f"{m.source} (adjusted)",
                }
            )
        out.append(m)
    return out


def process_base_speed(rule: BaseSpeedRule, ctx: RuleElementContext) -> Speed:
    return Speed(
        type=rule.selector,
        value=rule.value,
        source=ctx.source,
        predicate=rule.predicate,
    )


def calculate_speed(speeds: Sequence[Speed], active_conditions: Collection[str]) -> int:
    """Highest applicable base speed; base speeds replace each other rather than add."""
    applicable = [
        s for s in speeds if not s.predicate or all(t in active_conditions for t in s.predicate)
    ]
    if not applicable:
        return 0
    return max(s.value for s in applicable)


def speed_types(speeds: Sequence[Speed]) -> dict[str, int]:
    out: dict[str, int] = {}
    for s in speeds:
        out[s.type] = max(out.get(s.type, s.value), s.value)
    return out


def format_speeds(speeds: dict[str, int]) -> str:
    """e.g. "30 feet, fly 60 feet" (land speed first)."""
    parts = [f"{t} {v} feet" for t, v in speeds.items() if t != "land"]
    if "land" in speeds:
        parts.insert(0, f"{speeds['land']} feet")
    return ", ".join(parts)


def process_rule_elements(
    rules: Sequence[RuleElement], ctx: RuleElementContext
) -> ProcessedRuleElements:
    out = ProcessedRuleElements()
    for rule in rules:
        if isinstance(rule, FlatModifierRule):
            mod = process_flat_modifier(rule, ctx)
            if mod is None:
                out.skipped.append(
                    SkippedRule(key=rule.key, selector=rule.selector, reason=f"unresolved value {rule.value!r}")
                )
            else:
                out.modifiers.append(mod)
        elif isinstance(rule, AdjustModifierRule):
            out.modifiers = process_adjust_modifier(rule, out.modifiers)
        elif isinstance(rule, BaseSpeedRule):
            out.speeds.append(process_base_speed(rule, ctx))
    return out
