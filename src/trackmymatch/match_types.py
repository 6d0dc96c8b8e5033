from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

FOOTBALL = "football"
DARTS = "darts"
SPORTS: Tuple[str, ...] = (FOOTBALL, DARTS)

STATUS_UPCOMING = "upcoming"
STATUS_COMPLETED = "completed"

STORAGE_KEY = "trackmymatch:data"


def _frozen_mapping(value: Optional[Mapping[Any, Any]] = None) -> Mapping[Any, Any]:
    return MappingProxyType(dict(value or {}))


@dataclass(frozen=True)
class League:
    id: str
    name: str
    sport: str
    color: str = ""
    description: Optional[str] = None


@dataclass(frozen=True)
class Team:
    id: str
    league_id: str
    name: str
    badge_color: str = ""
    players: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    team_id: str
    sport: str
    position: str = ""


@dataclass(frozen=True)
class FixtureResult:
    home: int = 0
    away: int = 0


@dataclass(frozen=True)
class Fixture:
    id: str
    league_id: str
    home_team_id: str
    away_team_id: str
    date: str = ""
    venue: str = ""
    status: str = STATUS_UPCOMING
    result: Optional[FixtureResult] = None
    # team_id -> player_id -> stat_key -> value
    player_stats: Mapping[str, Mapping[str, Mapping[str, float]]] = field(default_factory=_frozen_mapping)

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED and self.result is not None


@dataclass(frozen=True)
class StoreSnapshot:
    """Complete state of the four collections at one point in time.

    Collections are read-only mappings keyed by entity id, in insertion order.
    Mutations never touch a snapshot; they build a new one.
    """

    leagues: Mapping[str, League] = field(default_factory=_frozen_mapping)
    teams: Mapping[str, Team] = field(default_factory=_frozen_mapping)
    players: Mapping[str, Player] = field(default_factory=_frozen_mapping)
    fixtures: Mapping[str, Fixture] = field(default_factory=_frozen_mapping)
    version: int = 0


@dataclass(frozen=True)
class StatField:
    key: str
    label: str


@dataclass
class StandingsRow:
    team_id: str
    team_name: str
    played: int = 0
    won: int = 0
    drawn: int = 0
    lost: int = 0
    points: int = 0
    goals_for: int = 0
    goals_against: int = 0
    diff: int = 0


@dataclass
class SeasonPlayerStats:
    player_id: str
    name: str
    team_id: str
    sport: str
    position: str = ""
    totals: Dict[str, float] = field(default_factory=dict)
    formatted: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class StoreConfig:
    data_dir: str = "data/trackmymatch"
    storage_key: str = STORAGE_KEY
    autosave: bool = True
    seed_when_missing: bool = True
    log_level: str = "WARNING"
    log_file: Optional[str] = None
