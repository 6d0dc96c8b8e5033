from typing import Dict, Tuple

from .match_types import DARTS, FOOTBALL, StatField

STAT_FIELDS: Dict[str, Tuple[StatField, ...]] = {
    FOOTBALL: (
        StatField("goals", "Goals"),
        StatField("assists", "Assists"),
        StatField("yellowCards", "Yellow cards"),
        StatField("redCards", "Red cards"),
    ),
    DARTS: (
        StatField("legsWon", "Legs won"),
        StatField("oneEighties", "180s"),
        StatField("highestCheckout", "Highest checkout"),
        StatField("average", "3-dart average"),
    ),
}


def stat_fields_for(sport: str) -> Tuple[StatField, ...]:
    return STAT_FIELDS.get(str(sport or "").strip().lower(), ())


def stat_keys_for(sport: str) -> Tuple[str, ...]:
    return tuple(stat.key for stat in stat_fields_for(sport))
