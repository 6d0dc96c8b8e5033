"""Entity store: snapshot-in, snapshot-out mutations with cascade rules.

Every operation is total. When the target id is unknown, or the payload
lacks a required field, the input snapshot is returned unchanged and the
miss is logged. Any operation that changes something returns a fresh
snapshot with ``version`` bumped by one.
"""

import logging
from dataclasses import replace
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union
from uuid import uuid4

from . import analytics
from .coercion import coerce_score, freeze_player_stats
from .config import resolve_store_config
from .match_types import (
    SPORTS,
    STATUS_COMPLETED,
    Fixture,
    FixtureResult,
    League,
    Player,
    SeasonPlayerStats,
    StandingsRow,
    StoreConfig,
    StoreSnapshot,
    Team,
)
from .persistence import load_snapshot, save_snapshot
from .result_entry import build_result_form

logger = logging.getLogger(__name__)

IdFactory = Callable[[str], str]
Patch = Mapping[str, Any]

# Patchable document key -> attribute name. snake_case attribute names are accepted too.
LEAGUE_FIELDS = {"name": "name", "sport": "sport", "color": "color", "description": "description"}
TEAM_FIELDS = {"name": "name", "badgeColor": "badge_color", "players": "players"}
PLAYER_FIELDS = {"name": "name", "position": "position", "sport": "sport"}
FIXTURE_FIELDS = {"homeTeamId": "home_team_id", "awayTeamId": "away_team_id", "date": "date", "venue": "venue"}

LEAGUE_IMMUTABLE = {"id": "id"}
TEAM_IMMUTABLE = {"id": "id", "leagueId": "league_id"}
PLAYER_IMMUTABLE = {"id": "id", "teamId": "team_id"}
FIXTURE_IMMUTABLE = {
    "id": "id",
    "leagueId": "league_id",
    "status": "status",
    "result": "result",
    "playerStats": "player_stats",
}


def generate_id(prefix: str = "id") -> str:
    return f"{prefix}-{uuid4().hex[:8]}"


def _text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _field(payload: Patch, camel: str, snake: str, default: Any = None) -> Any:
    if camel in payload:
        return payload[camel]
    return payload.get(snake, default)


def _miss(kind: str, entity_id: Any, operation: str) -> None:
    logger.debug("%s skipped: %s %r not found", operation, kind, entity_id)


def _is_payload(payload: Any, operation: str) -> bool:
    if isinstance(payload, Mapping):
        return True
    logger.warning("%s skipped: expected a mapping payload not %s", operation, type(payload).__name__)
    return False


def _next(
    snapshot: StoreSnapshot,
    *,
    leagues: Optional[Dict[str, League]] = None,
    teams: Optional[Dict[str, Team]] = None,
    players: Optional[Dict[str, Player]] = None,
    fixtures: Optional[Dict[str, Fixture]] = None,
) -> StoreSnapshot:
    return StoreSnapshot(
        leagues=snapshot.leagues if leagues is None else MappingProxyType(leagues),
        teams=snapshot.teams if teams is None else MappingProxyType(teams),
        players=snapshot.players if players is None else MappingProxyType(players),
        fixtures=snapshot.fixtures if fixtures is None else MappingProxyType(fixtures),
        version=snapshot.version + 1,
    )


def _resolve_patch(
    kind: str,
    record: Any,
    patch: Patch,
    allowed: Dict[str, str],
    immutable: Dict[str, str],
    required: Optional[Sequence[str]] = None,
) -> Dict[str, Any]:
    if not isinstance(patch, Mapping):
        logger.warning("%s %s: patch ignored, expected a mapping not %s", kind, record.id, type(patch).__name__)
        return {}

    required = required or ()
    allowed_attrs = set(allowed.values())
    immutable_attrs = set(immutable.values())
    changes: Dict[str, Any] = {}
    for key, value in patch.items():
        attr = allowed.get(key) or (key if key in allowed_attrs else None)
        if attr is not None:
            if attr in required and not _text(value):
                logger.warning("%s %s: required field %r cannot be blank, ignored", kind, record.id, key)
                continue
            changes[attr] = value
            continue
        attr = immutable.get(key) or (key if key in immutable_attrs else None)
        if attr is not None:
            if getattr(record, attr) != value:
                logger.warning("%s %s: field %r cannot be changed, ignored", kind, record.id, key)
            continue
        logger.warning("%s %s: unknown field %r ignored", kind, record.id, key)
    return changes


def _league_sport(snapshot: StoreSnapshot, league_id: str) -> str:
    league = snapshot.leagues.get(league_id)
    return league.sport if league is not None else ""


# Leagues --------------------------------------------------------------------


def add_league(snapshot: StoreSnapshot, fields: Patch, id_factory: IdFactory = generate_id) -> StoreSnapshot:
    if not _is_payload(fields, "add_league"):
        return snapshot
    name = _text(fields.get("name"))
    sport = _text(fields.get("sport")).lower()
    if not name:
        logger.warning("add_league skipped: name is required")
        return snapshot
    if sport not in SPORTS:
        logger.warning("add_league skipped: unsupported sport %r", fields.get("sport"))
        return snapshot

    league = League(
        id=id_factory("lg"),
        name=name,
        sport=sport,
        color=_text(fields.get("color")),
        description=fields.get("description"),
    )
    leagues = dict(snapshot.leagues)
    leagues[league.id] = league
    return _next(snapshot, leagues=leagues)


def update_league(snapshot: StoreSnapshot, league_id: str, patch: Patch) -> StoreSnapshot:
    league = snapshot.leagues.get(league_id)
    if league is None:
        _miss("league", league_id, "update_league")
        return snapshot

    changes = _resolve_patch("league", league, patch, LEAGUE_FIELDS, LEAGUE_IMMUTABLE, ("name",))
    if "sport" in changes:
        sport = _text(changes["sport"]).lower()
        if sport in SPORTS:
            changes["sport"] = sport
        else:
            logger.warning("league %s: unsupported sport %r ignored", league_id, changes["sport"])
            del changes["sport"]
    if not changes:
        return snapshot

    leagues = dict(snapshot.leagues)
    leagues[league_id] = replace(league, **changes)
    return _next(snapshot, leagues=leagues)


def delete_league(snapshot: StoreSnapshot, league_id: str) -> StoreSnapshot:
    if league_id not in snapshot.leagues:
        _miss("league", league_id, "delete_league")
        return snapshot

    team_ids = {team.id for team in snapshot.teams.values() if team.league_id == league_id}
    leagues = {key: league for key, league in snapshot.leagues.items() if key != league_id}
    teams = {key: team for key, team in snapshot.teams.items() if key not in team_ids}
    players = {key: player for key, player in snapshot.players.items() if player.team_id not in team_ids}
    fixtures = {
        key: fixture
        for key, fixture in snapshot.fixtures.items()
        if fixture.league_id != league_id
        and fixture.home_team_id not in team_ids
        and fixture.away_team_id not in team_ids
    }
    logger.info(
        "deleted league %s with %d teams, %d players, %d fixtures",
        league_id,
        len(team_ids),
        len(snapshot.players) - len(players),
        len(snapshot.fixtures) - len(fixtures),
    )
    return _next(snapshot, leagues=leagues, teams=teams, players=players, fixtures=fixtures)


# Teams ----------------------------------------------------------------------


def add_team(
    snapshot: StoreSnapshot,
    league_id: str,
    fields: Patch,
    id_factory: IdFactory = generate_id,
) -> StoreSnapshot:
    league = snapshot.leagues.get(league_id)
    if league is None:
        _miss("league", league_id, "add_team")
        return snapshot
    if not _is_payload(fields, "add_team"):
        return snapshot
    name = _text(fields.get("name"))
    if not name:
        logger.warning("add_team skipped: name is required")
        return snapshot

    sport = _text(fields.get("sport")).lower() or league.sport
    names = [_text(item) for item in fields.get("players") or []]
    positions = list(fields.get("positions") or [])

    team_id = id_factory("team")
    new_players: Dict[str, Player] = {}
    for index, player_name in enumerate(names):
        if not player_name:
            continue
        player_id = id_factory("player")
        new_players[player_id] = Player(
            id=player_id,
            name=player_name,
            team_id=team_id,
            sport=sport,
            position=_text(positions[index]) if index < len(positions) else "",
        )

    team = Team(
        id=team_id,
        league_id=league_id,
        name=name,
        badge_color=_text(_field(fields, "badgeColor", "badge_color")),
        players=tuple(new_players),
    )
    teams = dict(snapshot.teams)
    teams[team_id] = team
    players = dict(snapshot.players)
    players.update(new_players)
    return _next(snapshot, teams=teams, players=players)


def update_team(snapshot: StoreSnapshot, team_id: str, patch: Patch) -> StoreSnapshot:
    team = snapshot.teams.get(team_id)
    if team is None:
        _miss("team", team_id, "update_team")
        return snapshot

    changes = _resolve_patch("team", team, patch, TEAM_FIELDS, TEAM_IMMUTABLE, ("name",))
    if "players" in changes:
        # Membership changes go through add_player/delete_player; a patch may only reorder.
        order = tuple(str(player_id) for player_id in changes["players"] or [])
        if len(set(order)) == len(order) and sorted(order) == sorted(team.players):
            changes["players"] = order
        else:
            logger.warning("team %s: player list patch is not a reordering of the current squad, ignored", team_id)
            del changes["players"]
    if not changes:
        return snapshot

    teams = dict(snapshot.teams)
    teams[team_id] = replace(team, **changes)
    return _next(snapshot, teams=teams)


def delete_team(snapshot: StoreSnapshot, team_id: str) -> StoreSnapshot:
    team = snapshot.teams.get(team_id)
    if team is None:
        _miss("team", team_id, "delete_team")
        return snapshot

    members = set(team.players)
    teams = {key: value for key, value in snapshot.teams.items() if key != team_id}
    players = {
        key: player
        for key, player in snapshot.players.items()
        if key not in members and player.team_id != team_id
    }
    fixtures = {
        key: fixture
        for key, fixture in snapshot.fixtures.items()
        if fixture.home_team_id != team_id and fixture.away_team_id != team_id
    }
    return _next(snapshot, teams=teams, players=players, fixtures=fixtures)


# Players --------------------------------------------------------------------


def add_player(
    snapshot: StoreSnapshot,
    team_id: str,
    fields: Patch,
    id_factory: IdFactory = generate_id,
) -> StoreSnapshot:
    team = snapshot.teams.get(team_id)
    if team is None:
        _miss("team", team_id, "add_player")
        return snapshot
    if not _is_payload(fields, "add_player"):
        return snapshot
    name = _text(fields.get("name"))
    if not name:
        logger.warning("add_player skipped: name is required")
        return snapshot

    player = Player(
        id=id_factory("player"),
        name=name,
        team_id=team_id,
        sport=_text(fields.get("sport")).lower() or _league_sport(snapshot, team.league_id),
        position=_text(fields.get("position")),
    )
    players = dict(snapshot.players)
    players[player.id] = player
    teams = dict(snapshot.teams)
    teams[team_id] = replace(team, players=team.players + (player.id,))
    return _next(snapshot, teams=teams, players=players)


def update_player(snapshot: StoreSnapshot, player_id: str, patch: Patch) -> StoreSnapshot:
    player = snapshot.players.get(player_id)
    if player is None:
        _miss("player", player_id, "update_player")
        return snapshot

    changes = _resolve_patch("player", player, patch, PLAYER_FIELDS, PLAYER_IMMUTABLE, ("name",))
    if not changes:
        return snapshot
    players = dict(snapshot.players)
    players[player_id] = replace(player, **changes)
    return _next(snapshot, players=players)


def delete_player(snapshot: StoreSnapshot, team_id: str, player_id: str) -> StoreSnapshot:
    team = snapshot.teams.get(team_id)
    if team is None:
        _miss("team", team_id, "delete_player")
        return snapshot
    player = snapshot.players.get(player_id)
    if player is not None and player.team_id != team_id:
        logger.warning("delete_player skipped: player %s belongs to team %s, not %s", player_id, player.team_id, team_id)
        return snapshot
    if player is None and player_id not in team.players:
        _miss("player", player_id, "delete_player")
        return snapshot

    players = {key: value for key, value in snapshot.players.items() if key != player_id}
    teams = dict(snapshot.teams)
    teams[team_id] = replace(team, players=tuple(pid for pid in team.players if pid != player_id))
    return _next(snapshot, teams=teams, players=players)


# Fixtures -------------------------------------------------------------------


def _fixture_teams_valid(snapshot: StoreSnapshot, league_id: str, home_team_id: str, away_team_id: str) -> bool:
    if home_team_id == away_team_id:
        logger.warning("fixture rejected: home and away team are both %r", home_team_id)
        return False
    for team_id in (home_team_id, away_team_id):
        team = snapshot.teams.get(team_id)
        if team is None:
            logger.warning("fixture rejected: team %r not found", team_id)
            return False
        if team.league_id != league_id:
            logger.warning("fixture rejected: team %s is not in league %s", team_id, league_id)
            return False
    return True


def add_fixture(snapshot: StoreSnapshot, payload: Patch, id_factory: IdFactory = generate_id) -> StoreSnapshot:
    if not _is_payload(payload, "add_fixture"):
        return snapshot
    league_id = _text(_field(payload, "leagueId", "league_id"))
    home_team_id = _text(_field(payload, "homeTeamId", "home_team_id"))
    away_team_id = _text(_field(payload, "awayTeamId", "away_team_id"))
    if league_id not in snapshot.leagues:
        _miss("league", league_id, "add_fixture")
        return snapshot
    if not _fixture_teams_valid(snapshot, league_id, home_team_id, away_team_id):
        return snapshot

    fixture = Fixture(
        id=id_factory("fixture"),
        league_id=league_id,
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        date=_text(payload.get("date")),
        venue=_text(payload.get("venue")),
    )
    fixtures = dict(snapshot.fixtures)
    fixtures[fixture.id] = fixture
    return _next(snapshot, fixtures=fixtures)


def update_fixture(snapshot: StoreSnapshot, fixture_id: str, patch: Patch) -> StoreSnapshot:
    fixture = snapshot.fixtures.get(fixture_id)
    if fixture is None:
        _miss("fixture", fixture_id, "update_fixture")
        return snapshot

    changes = _resolve_patch("fixture", fixture, patch, FIXTURE_FIELDS, FIXTURE_IMMUTABLE)
    if not changes:
        return snapshot
    updated = replace(fixture, **{key: _text(value) for key, value in changes.items()})
    if not _fixture_teams_valid(snapshot, updated.league_id, updated.home_team_id, updated.away_team_id):
        return snapshot

    fixtures = dict(snapshot.fixtures)
    fixtures[fixture_id] = updated
    return _next(snapshot, fixtures=fixtures)


def delete_fixture(snapshot: StoreSnapshot, fixture_id: str) -> StoreSnapshot:
    if fixture_id not in snapshot.fixtures:
        _miss("fixture", fixture_id, "delete_fixture")
        return snapshot
    fixtures = {key: value for key, value in snapshot.fixtures.items() if key != fixture_id}
    return _next(snapshot, fixtures=fixtures)


def record_result(snapshot: StoreSnapshot, fixture_id: str, payload: Patch) -> StoreSnapshot:
    fixture = snapshot.fixtures.get(fixture_id)
    if fixture is None:
        _miss("fixture", fixture_id, "record_result")
        return snapshot
    if not _is_payload(payload, "record_result"):
        return snapshot

    score = payload.get("score")
    if isinstance(score, FixtureResult):
        result = FixtureResult(home=coerce_score(score.home), away=coerce_score(score.away))
    else:
        score = score if isinstance(score, Mapping) else {}
        result = FixtureResult(home=coerce_score(score.get("home")), away=coerce_score(score.get("away")))

    completed = replace(
        fixture,
        status=STATUS_COMPLETED,
        result=result,
        player_stats=freeze_player_stats(_field(payload, "playerStats", "player_stats")),
    )
    fixtures = dict(snapshot.fixtures)
    fixtures[fixture_id] = completed
    logger.info("recorded result %d-%d for fixture %s", result.home, result.away, fixture_id)
    return _next(snapshot, fixtures=fixtures)


# Store handle ---------------------------------------------------------------


class LeagueStore:
    """Owns the current snapshot and is the only mutation path for callers.

    Each mutation runs a pure operation, swaps the snapshot reference in one
    assignment, then saves. A failed save is logged and the in-memory change
    stands.
    """

    def __init__(
        self,
        snapshot: Optional[StoreSnapshot] = None,
        *,
        config: Optional[Union[StoreConfig, Dict[str, Any]]] = None,
        saver: Optional[Callable[[StoreSnapshot], Any]] = None,
        id_factory: Optional[IdFactory] = None,
    ):
        self.config = resolve_store_config(config)
        if snapshot is None:
            # Without a custom saver this store writes the configured document, so start from it.
            snapshot = load_snapshot(self.config) if saver is None else StoreSnapshot()
        self._snapshot = snapshot
        self._saver = saver
        self._id_factory = id_factory or generate_id

    @classmethod
    def open(cls, config: Optional[Union[StoreConfig, Dict[str, Any]]] = None, **kwargs: Any) -> "LeagueStore":
        cfg = resolve_store_config(config)
        return cls(load_snapshot(cfg), config=cfg, **kwargs)

    @property
    def snapshot(self) -> StoreSnapshot:
        return self._snapshot

    @property
    def version(self) -> int:
        return self._snapshot.version

    def _commit(self, snapshot: StoreSnapshot) -> StoreSnapshot:
        if snapshot is self._snapshot:
            return snapshot
        self._snapshot = snapshot
        self._persist(snapshot)
        return snapshot

    def _persist(self, snapshot: StoreSnapshot) -> None:
        if self._saver is None and not self.config.autosave:
            return
        try:
            if self._saver is not None:
                self._saver(snapshot)
            else:
                save_snapshot(snapshot, self.config)
        except Exception:
            logger.exception("saving snapshot version %d failed", snapshot.version)

    def add_league(self, fields: Patch) -> StoreSnapshot:
        return self._commit(add_league(self._snapshot, fields, self._id_factory))

    def update_league(self, league_id: str, patch: Patch) -> StoreSnapshot:
        return self._commit(update_league(self._snapshot, league_id, patch))

    def delete_league(self, league_id: str) -> StoreSnapshot:
        return self._commit(delete_league(self._snapshot, league_id))

    def add_team(self, league_id: str, fields: Patch) -> StoreSnapshot:
        return self._commit(add_team(self._snapshot, league_id, fields, self._id_factory))

    def update_team(self, team_id: str, patch: Patch) -> StoreSnapshot:
        return self._commit(update_team(self._snapshot, team_id, patch))

    def delete_team(self, team_id: str) -> StoreSnapshot:
        return self._commit(delete_team(self._snapshot, team_id))

    def add_player(self, team_id: str, fields: Patch) -> StoreSnapshot:
        return self._commit(add_player(self._snapshot, team_id, fields, self._id_factory))

    def update_player(self, player_id: str, patch: Patch) -> StoreSnapshot:
        return self._commit(update_player(self._snapshot, player_id, patch))

    def delete_player(self, team_id: str, player_id: str) -> StoreSnapshot:
        return self._commit(delete_player(self._snapshot, team_id, player_id))

    def add_fixture(self, payload: Patch) -> StoreSnapshot:
        return self._commit(add_fixture(self._snapshot, payload, self._id_factory))

    def update_fixture(self, fixture_id: str, patch: Patch) -> StoreSnapshot:
        return self._commit(update_fixture(self._snapshot, fixture_id, patch))

    def delete_fixture(self, fixture_id: str) -> StoreSnapshot:
        return self._commit(delete_fixture(self._snapshot, fixture_id))

    def record_result(self, fixture_id: str, payload: Patch) -> StoreSnapshot:
        return self._commit(record_result(self._snapshot, fixture_id, payload))

    def standings(self, league_id: str) -> List[StandingsRow]:
        return analytics.standings(self._snapshot, league_id)

    def season_player_stats(self, league_id: str) -> List[SeasonPlayerStats]:
        return analytics.season_player_stats(self._snapshot, league_id)

    def result_form(self, fixture_id: str) -> Optional[Dict[str, Any]]:
        return build_result_form(self._snapshot, fixture_id)
