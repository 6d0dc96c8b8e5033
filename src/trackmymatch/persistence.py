"""Whole-document persistence for store snapshots.

The document keeps the camelCase shape the mobile app wrote under
``trackmymatch:data``: a ``leagues`` list and ``teams``/``players``/``fixtures``
objects keyed by id. Load and save never raise; failures are logged and load
falls back to the bundled seed document.
"""

import json
import logging
import re
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Union

import numpy as np

from .coercion import coerce_score, freeze_player_stats
from .config import resolve_store_config
from .match_types import (
    STATUS_COMPLETED,
    STATUS_UPCOMING,
    Fixture,
    FixtureResult,
    League,
    Player,
    StoreConfig,
    StoreSnapshot,
    Team,
)
from .seed_data import seed_document

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.-]")


def storage_path(config: Optional[Union[StoreConfig, Dict[str, Any]]] = None) -> Path:
    cfg = resolve_store_config(config)
    return Path(cfg.data_dir) / f"{_UNSAFE_FILENAME.sub('_', cfg.storage_key)}.json"


def _default_json(value: Any) -> Any:
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, tuple):
        return list(value)
    if isinstance(value, np.generic):
        return value.item()
    return str(value)


def _atomic_json_write(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    temp = path.with_suffix(path.suffix + ".tmp")
    temp.write_text(json.dumps(payload, indent=2, default=_default_json), encoding="utf-8")
    temp.replace(path)


def _plain_stats(player_stats: Mapping[str, Mapping[str, Mapping[str, Any]]]) -> Dict[str, Any]:
    return {
        team_id: {player_id: dict(stats) for player_id, stats in group.items()}
        for team_id, group in player_stats.items()
    }


def snapshot_to_document(snapshot: StoreSnapshot) -> Dict[str, Any]:
    return {
        "leagues": [
            {
                "id": league.id,
                "name": league.name,
                "sport": league.sport,
                "color": league.color,
                "description": league.description,
            }
            for league in snapshot.leagues.values()
        ],
        "teams": {
            team.id: {
                "id": team.id,
                "leagueId": team.league_id,
                "name": team.name,
                "badgeColor": team.badge_color,
                "players": list(team.players),
            }
            for team in snapshot.teams.values()
        },
        "players": {
            player.id: {
                "id": player.id,
                "name": player.name,
                "position": player.position,
                "sport": player.sport,
                "teamId": player.team_id,
            }
            for player in snapshot.players.values()
        },
        "fixtures": {
            fixture.id: {
                "id": fixture.id,
                "leagueId": fixture.league_id,
                "homeTeamId": fixture.home_team_id,
                "awayTeamId": fixture.away_team_id,
                "date": fixture.date,
                "venue": fixture.venue,
                "status": fixture.status,
                "result": (
                    {"home": fixture.result.home, "away": fixture.result.away}
                    if fixture.result is not None
                    else None
                ),
                "playerStats": _plain_stats(fixture.player_stats),
            }
            for fixture in snapshot.fixtures.values()
        },
    }


def _records(document: Mapping[str, Any], key: str) -> List[Dict[str, Any]]:
    value = document.get(key)
    if isinstance(value, Mapping):
        value = list(value.values())
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, dict)]


def _required(record: Dict[str, Any], kind: str, *keys: str) -> bool:
    missing = [key for key in keys if not record.get(key)]
    if missing:
        logger.warning("skipping %s record %r: missing %s", kind, record.get("id"), ", ".join(missing))
        return False
    return True


def _fixture_from_record(record: Dict[str, Any]) -> Fixture:
    raw_result = record.get("result")
    result = None
    if isinstance(raw_result, Mapping):
        result = FixtureResult(home=coerce_score(raw_result.get("home")), away=coerce_score(raw_result.get("away")))
    return Fixture(
        id=str(record["id"]),
        league_id=str(record["leagueId"]),
        home_team_id=str(record["homeTeamId"]),
        away_team_id=str(record["awayTeamId"]),
        date=str(record.get("date") or ""),
        venue=str(record.get("venue") or ""),
        status=STATUS_COMPLETED if result is not None else STATUS_UPCOMING,
        result=result,
        player_stats=freeze_player_stats(record.get("playerStats")) if result is not None else freeze_player_stats({}),
    )


def snapshot_from_document(document: Any) -> StoreSnapshot:
    if not isinstance(document, Mapping):
        logger.warning("store document is not an object; starting empty")
        return StoreSnapshot()

    leagues: Dict[str, League] = {}
    for record in _records(document, "leagues"):
        if not _required(record, "league", "id", "name", "sport"):
            continue
        leagues[str(record["id"])] = League(
            id=str(record["id"]),
            name=str(record["name"]),
            sport=str(record["sport"]),
            color=str(record.get("color") or ""),
            description=record.get("description"),
        )

    teams: Dict[str, Team] = {}
    for record in _records(document, "teams"):
        if not _required(record, "team", "id", "leagueId", "name"):
            continue
        # dict.fromkeys keeps order and drops duplicate ids.
        member_ids = tuple(dict.fromkeys(str(pid) for pid in record.get("players") or []))
        teams[str(record["id"])] = Team(
            id=str(record["id"]),
            league_id=str(record["leagueId"]),
            name=str(record["name"]),
            badge_color=str(record.get("badgeColor") or ""),
            players=member_ids,
        )

    players: Dict[str, Player] = {}
    for record in _records(document, "players"):
        if not _required(record, "player", "id", "name", "teamId"):
            continue
        players[str(record["id"])] = Player(
            id=str(record["id"]),
            name=str(record["name"]),
            team_id=str(record["teamId"]),
            sport=str(record.get("sport") or ""),
            position=str(record.get("position") or ""),
        )

    fixtures: Dict[str, Fixture] = {}
    for record in _records(document, "fixtures"):
        if not _required(record, "fixture", "id", "leagueId", "homeTeamId", "awayTeamId"):
            continue
        fixtures[str(record["id"])] = _fixture_from_record(record)

    return StoreSnapshot(
        leagues=MappingProxyType(leagues),
        teams=MappingProxyType(teams),
        players=MappingProxyType(players),
        fixtures=MappingProxyType(fixtures),
    )


def _fallback_snapshot(cfg: StoreConfig) -> StoreSnapshot:
    if cfg.seed_when_missing:
        return snapshot_from_document(seed_document())
    return StoreSnapshot()


def load_snapshot(config: Optional[Union[StoreConfig, Dict[str, Any]]] = None) -> StoreSnapshot:
    cfg = resolve_store_config(config)
    path = storage_path(cfg)
    if not path.exists():
        logger.info("no stored document at %s; using seed data", path)
        return _fallback_snapshot(cfg)

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except Exception as exc:
        logger.warning("failed to load store document %s: %s", path, exc)
        return _fallback_snapshot(cfg)

    if not isinstance(document, dict):
        logger.warning("store document %s is not an object; using seed data", path)
        return _fallback_snapshot(cfg)
    return snapshot_from_document(document)


def save_snapshot(snapshot: StoreSnapshot, config: Optional[Union[StoreConfig, Dict[str, Any]]] = None) -> bool:
    cfg = resolve_store_config(config)
    path = storage_path(cfg)
    try:
        _atomic_json_write(path, snapshot_to_document(snapshot))
    except Exception as exc:
        logger.error("failed to persist store document %s: %s", path, exc, extra={"version": snapshot.version})
        return False
    logger.debug("saved store document %s", path, extra={"version": snapshot.version})
    return True
