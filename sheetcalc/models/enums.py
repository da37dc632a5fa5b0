from enum import Enum


class ModifierKind(str, Enum):
    """
    Stacking category of a modifier:
    - STATUS / CIRCUMSTANCE / ITEM: bonuses of the same kind don't stack (highest wins)
    - UNTYPED: bonuses always stack
    Penalties always stack regardless of kind.
    """

    STATUS = "status"
    CIRCUMSTANCE = "circumstance"
    ITEM = "item"
    UNTYPED = "untyped"


class AdjustMode(str, Enum):
    ADD = "add"
    MULTIPLY = "multiply"
    OVERRIDE = "override"
    UPGRADE = "upgrade"
    DOWNGRADE = "downgrade"


class ProficiencyRank(str, Enum):
    UNTRAINED = "untrained"
    TRAINED = "trained"
    EXPERT = "expert"
    MASTER = "master"
    LEGENDARY = "legendary"
