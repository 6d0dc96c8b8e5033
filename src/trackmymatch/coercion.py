import math
from types import MappingProxyType
from typing import Any, Dict, Mapping, Union

import numpy as np

Number = Union[int, float]


def coerce_number(value: Any) -> Number:
    """Best-effort numeric read of a form or document value; malformed input is 0."""
    if isinstance(value, (bool, np.bool_)):
        return int(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    try:
        number = float(value.strip()) if isinstance(value, str) else float(value)
    except Exception:
        return 0
    if not math.isfinite(number):
        return 0
    return int(number) if number.is_integer() else number


def coerce_score(value: Any) -> int:
    return max(0, int(coerce_number(value)))


def freeze_player_stats(raw: Any) -> Mapping[str, Mapping[str, Mapping[str, Number]]]:
    """Read-only team -> player -> stat map with every value coerced; non-mapping levels are dropped."""
    teams: Dict[str, Mapping[str, Mapping[str, Number]]] = {}
    if not isinstance(raw, Mapping):
        return MappingProxyType(teams)
    for team_id, group in raw.items():
        if not isinstance(group, Mapping):
            continue
        players: Dict[str, Mapping[str, Number]] = {}
        for player_id, stats in group.items():
            if not isinstance(stats, Mapping):
                continue
            players[str(player_id)] = MappingProxyType({str(key): coerce_number(value) for key, value in stats.items()})
        teams[str(team_id)] = MappingProxyType(players)
    return MappingProxyType(teams)
