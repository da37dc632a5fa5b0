import logging

import pytest
from pydantic import TypeAdapter, ValidationError

from sheetcalc.engine.rule_elements import (
    calculate_speed,
    format_speeds,
    generate_label,
    process_adjust_modifier,
    process_flat_modifier,
    process_rule_elements,
    resolve_value,
    should_apply_adjustment,
    speed_types,
)
from sheetcalc.models.enums import AdjustMode, ModifierKind
from sheetcalc.models.modifiers import Modifier
from sheetcalc.models.rule_elements import (
    AdjustModifierRule,
    BaseSpeedRule,
    FlatModifierRule,
    RuleElement,
    RuleElementContext,
    Speed,
)

CTX = RuleElementContext(source="Fleet", level=6)


@pytest.mark.parametrize(
    "raw, expected",
    [
        (5, 5),
        (-1.5, -1.5),
        ("3", 3),
        ("2.5", 2.5),
        ("@actor.level", 6),
        ("@actor.level * 2", 12),
        ("@actor.level / 4", 1),
        ("@actor.level/2", 3),
    ],
)
def test_resolve_value(raw, expected):
    assert resolve_value(raw, CTX) == expected


def test_resolve_value_unparseable_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="sheetcalc.engine.rule_elements"):
        assert resolve_value("@actor.abilities.str.mod", CTX) is None
        assert resolve_value("nan", CTX) is None
        assert resolve_value("@actor.level / 0", CTX) is None
    assert "Unable to resolve" in caplog.text


def test_generate_label():
    assert generate_label("land-speed", 5) == "+5 Land Speed"
    assert generate_label("ac", -1) == "-1 Ac"


def test_flat_modifier_defaults():
    m = process_flat_modifier(FlatModifierRule(selector="land-speed", value=5), CTX)
    assert m is not None
    assert m.label == "+5 Land Speed"
    assert m.source == "Fleet"
    assert m.kind == ModifierKind.UNTYPED
    assert m.selector == "land-speed"
    assert m.predicate is None and m.enabled


def test_flat_modifier_full():
    rule = FlatModifierRule(
        selector="damage",
        value="@actor.level / 2",
        type=ModifierKind.STATUS,
        label="Rage",
        predicate=["raging"],
        enabled=False,
    )
    m = process_flat_modifier(rule, CTX)
    assert m is not None
    assert (m.label, m.value, m.kind, m.predicate, m.enabled) == (
        "Rage",
        3,
        ModifierKind.STATUS,
        ("raging",),
        False,
    )


def test_flat_modifier_unresolved_is_none():
    assert process_flat_modifier(FlatModifierRule(selector="ac", value="@item.level"), CTX) is None


def _ac(value, source, label=None):
    return Modifier(label=label or source, source=source, value=value, kind=ModifierKind.ITEM, selector="ac")


@pytest.mark.parametrize(
    "mode, amount, expected",
    [
        (AdjustMode.ADD, 1, 3),
        (AdjustMode.MULTIPLY, 2, 4),
        (AdjustMode.OVERRIDE, 5, 5),
        (AdjustMode.UPGRADE, 1, 2),
        (AdjustMode.UPGRADE, 4, 4),
        (AdjustMode.DOWNGRADE, 1, 1),
    ],
)
def test_adjust_modifier_modes(mode, amount, expected):
    (out,) = process_adjust_modifier(AdjustModifierRule(selector="ac", mode=mode, value=amount), [_ac(2, "Armor")])
    assert out.value == expected
    assert out.source == "Armor (adjusted)"


def test_adjust_modifier_slug_and_selector_filter():
    armor, shield = _ac(2, "Leather Armor"), _ac(1, "Buckler")
    speed = Modifier(label="Fleet", source="Fleet", value=5, selector="land-speed")
    out = process_adjust_modifier(AdjustModifierRule(selector="ac", slug="ARMOR", value=1), [armor, shield, speed])
    assert out[0].value == 3
    assert out[1] is shield and out[2] is speed
    # original untouched
    assert armor.value == 2


def test_adjust_without_match_returns_same():
    mods = [_ac(2, "Armor")]
    out = process_adjust_modifier(AdjustModifierRule(selector="will", value=1), mods)
    assert out[0] is mods[0]


def test_should_apply_adjustment():
    rule = AdjustModifierRule(selector="ac", predicate=["a", "b"])
    assert not should_apply_adjustment(rule, {"a"})
    assert should_apply_adjustment(rule, {"a", "b"})
    assert should_apply_adjustment(AdjustModifierRule(selector="ac"), set())


def test_speeds():
    speeds = [
        Speed(type="land", value=25, source="Dwarf"),
        Speed(type="land", value=30, source="Boots", predicate=["boots-active"]),
        Speed(type="fly", value=60, source="Fly"),
    ]
    assert calculate_speed(speeds, set()) == 60
    assert calculate_speed(speeds[:2], set()) == 25
    assert calculate_speed(speeds[:2], {"boots-active"}) == 30
    assert calculate_speed([], set()) == 0
    types = speed_types(speeds)
    assert types == {"land": 30, "fly": 60}
    assert format_speeds(types) == "30 feet, fly 60 feet"


def test_rule_element_union_dispatch():
    ta = TypeAdapter(list[RuleElement])
    rules = ta.validate_python(
        [
            {"key": "FlatModifier", "selector": "ac", "value": 2, "type": "item", "label": "Armor Potency"},
            {"key": "FlatModifier", "selector": "ac", "value": "@foo"},
            {"key": "AdjustModifier", "selector": "ac", "slug": "potency", "mode": "add", "value": 1},
            {"key": "BaseSpeed", "value": 25},
        ]
    )
    assert isinstance(rules[0], FlatModifierRule)
    assert isinstance(rules[2], AdjustModifierRule)
    assert isinstance(rules[3], BaseSpeedRule)

    out = process_rule_elements(rules, RuleElementContext(source="Plate", level=3))
    assert [(m.label, m.value) for m in out.modifiers] == [("Armor Potency", 3)]
    assert out.speeds == [Speed(type="land", value=25, source="Plate")]
    assert len(out.skipped) == 1 and out.skipped[0].selector == "ac"


def test_unknown_rule_key_rejected():
    with pytest.raises(ValidationError):
        TypeAdapter(RuleElement).validate_python({"key": "Aura", "selector": "ac"})
