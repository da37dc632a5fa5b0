from ..models.enums import ProficiencyRank

RANK_BONUS: dict[ProficiencyRank, int] = {
    ProficiencyRank.UNTRAINED: 0,
    ProficiencyRank.TRAINED: 2,
    ProficiencyRank.EXPERT: 4,
    ProficiencyRank.MASTER: 6,
    ProficiencyRank.LEGENDARY: 8,
}


def ability_modifier(score: int) -> int:
    return (score - 10) // 2


def proficiency_bonus(rank: ProficiencyRank, level: int, without_level: bool = False) -> int:
    """
    Rank bonus plus character level once trained.
    With the proficiency-without-level variant only the flat rank bonus counts.
    """
    bonus = RANK_BONUS[rank]
    if without_level or rank == ProficiencyRank.UNTRAINED:
        return bonus
    return level + bonus
