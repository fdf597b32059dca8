"""
Team Context Aggregator.

Per una squadra (lega/stagione) recupera le ultime N fixtures e le relative
statistiche, le scompone in valori "for"/"against" per partita e ne calcola
le medie.

- I gol arrivano sempre dal record fixture, le altre metriche dal payload
  statistiche (che può mancare del tutto).
- Una fetch statistiche fallita non invalida le altre partite: i contatori
  di quella partita restano None.
- Media su zero campioni non nulli => None, mai 0.
"""
from __future__ import annotations

import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from core.config import LAST_MAX, LAST_MIN, get_settings
from core.errors import MalformedInputError
from core.logging import get_logger
from core.models import METRICS, SIDES, FixtureStatus, TeamAggregate, TeamMatchRecord
from core.normalization import as_int, classify_status
from monitoring.prometheus_exporter import record_statistics_missing
from providers.api_football.base import StatsSourceBase
from providers.api_football.exceptions import UpstreamError

logger = get_logger("context.team_context")

# Etichette API-Football per le metriche da statistiche
STAT_LABELS: Dict[str, str] = {
    "shots": "Total Shots",
    "shots_on_target": "Shots on Goal",
    "corners": "Corner Kicks",
    "yellow_cards": "Yellow Cards",
    "red_cards": "Red Cards",
}


@dataclass
class TeamContext:
    team_id: int
    league_id: int
    season: int
    last_requested: int
    matches: List[TeamMatchRecord]
    aggregate: TeamAggregate

    def to_dict(self) -> Dict[str, Any]:
        return {
            "team_id": self.team_id,
            "league_id": self.league_id,
            "season": self.season,
            "last_requested": self.last_requested,
            "fixtures_count": len(self.matches),
            "matches": [m.to_dict() for m in self.matches],
            "aggregate": self.aggregate.to_dict(),
        }


def to_number(v: Any) -> Optional[float]:
    if v is None or isinstance(v, bool):
        return None
    if isinstance(v, (int, float)):
        return float(v) if math.isfinite(v) else None
    if isinstance(v, str):
        try:
            n = float(v.strip())
        except ValueError:
            return None
        return n if math.isfinite(n) else None
    if isinstance(v, dict) and "total" in v:
        return to_number(v.get("total"))
    return None


def to_count(v: Any) -> Optional[int]:
    n = to_number(v)
    return None if n is None else int(round(n))


def pick_stat(stats: Sequence[Dict[str, Any]], label: str) -> Any:
    """Valore della statistica con etichetta `label` (match esatto case-insensitive)."""
    wanted = label.lower()
    for item in stats or []:
        if str((item or {}).get("type") or "").lower() == wanted:
            return item.get("value")
    return None


def safe_avg(values: Sequence[Optional[float]]) -> Optional[float]:
    xs = [float(v) for v in values if v is not None]
    if not xs:
        return None
    return sum(xs) / len(xs)


def _stats_block(payload: List[Dict[str, Any]], team_id: Optional[int]) -> List[Dict[str, Any]]:
    if team_id is None:
        return []
    for block in payload:
        if as_int(((block or {}).get("team") or {}).get("id")) == team_id:
            return block.get("statistics") or []
    return []


def build_match_record(
    item: Dict[str, Any],
    team_id: int,
    statistics: Optional[List[Dict[str, Any]]],
) -> TeamMatchRecord:
    fixture = item.get("fixture") or {}
    teams = item.get("teams") or {}
    goals = item.get("goals") or {}
    home = teams.get("home") or {}
    away = teams.get("away") or {}

    is_home = as_int(home.get("id")) == team_id
    opponent = away if is_home else home

    record = TeamMatchRecord(
        fixture_id=as_int(fixture.get("id")),
        date=fixture.get("date"),
        status=(fixture.get("status") or {}).get("short"),
        is_home=is_home,
        opponent_id=as_int(opponent.get("id")),
        opponent_name=opponent.get("name"),
        goals_for=to_count(goals.get("home") if is_home else goals.get("away")),
        goals_against=to_count(goals.get("away") if is_home else goals.get("home")),
    )
    if not statistics:
        return record

    team_stats = _stats_block(statistics, team_id)
    opp_stats = _stats_block(statistics, record.opponent_id)
    for metric, label in STAT_LABELS.items():
        setattr(record, f"{metric}_for", to_count(pick_stat(team_stats, label)))
        setattr(record, f"{metric}_against", to_count(pick_stat(opp_stats, label)))
    return record


def aggregate_matches(matches: Sequence[TeamMatchRecord]) -> TeamAggregate:
    averages: Dict[str, Optional[float]] = {}
    for metric in METRICS:
        for side in SIDES:
            averages[f"{metric}_{side}"] = safe_avg([m.value(metric, side) for m in matches])
    return TeamAggregate(match_count=len(matches), averages=averages)


def validate_last(last_n: Any) -> int:
    try:
        n = int(last_n)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"last deve essere un intero (valore: {last_n!r})") from e
    if not LAST_MIN <= n <= LAST_MAX:
        raise MalformedInputError(
            f"last fuori range [{LAST_MIN}, {LAST_MAX}] (valore: {n})",
            details={"last": n},
        )
    return n


def _fetch_statistics(source: StatsSourceBase, fixture_id: Optional[int]) -> Optional[List[Dict[str, Any]]]:
    if fixture_id is None:
        return None
    try:
        payload = source.get_fixture_statistics(fixture_id)
    except UpstreamError as exc:
        logger.warning(
            "Statistiche non disponibili, contatori a None: %s",
            exc,
            extra={"fixture_id": fixture_id, "status": exc.status},
        )
        record_statistics_missing()
        return None
    if not payload:
        record_statistics_missing()
        return None
    return payload


def build_team_context(
    source: StatsSourceBase,
    team_id: int,
    league_id: int,
    season: int,
    last_n: Optional[int] = None,
) -> TeamContext:
    """
    Profilo recente della squadra.

    Considera solo le fixture concluse restituite dal provider.
    Solleva UpstreamError solo se fallisce la lista fixtures; le statistiche
    delle singole partite vengono scaricate in parallelo (pool limitato da
    CONTEXT_MAX_WORKERS) e i loro fallimenti sono assorbiti.
    """
    settings = get_settings()
    last = validate_last(settings.context_default_last if last_n is None else last_n)

    fixtures: List[Dict[str, Any]] = []
    seen = set()
    # Solo partite concluse (FT/AET/PEN), un record per (squadra, fixture)
    for item in source.get_team_fixtures(team_id, league_id, season, last):
        fixture = item.get("fixture") or {}
        if classify_status((fixture.get("status") or {}).get("short")) is not FixtureStatus.FINISHED:
            continue
        fid = as_int(fixture.get("id"))
        if fid is not None and fid in seen:
            continue
        seen.add(fid)
        fixtures.append(item)
    logger.info(
        "Fixtures recuperate per team context",
        extra={"team_id": team_id, "count": len(fixtures)},
    )

    fixture_ids = [as_int((f.get("fixture") or {}).get("id")) for f in fixtures]
    if fixture_ids:
        workers = min(settings.context_max_workers, len(fixture_ids))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="stats") as pool:
            stats_list = list(pool.map(lambda fid: _fetch_statistics(source, fid), fixture_ids))
    else:
        stats_list = []

    matches = [
        build_match_record(item, team_id, stats)
        for item, stats in zip(fixtures, stats_list)
    ]
    return TeamContext(
        team_id=team_id,
        league_id=league_id,
        season=season,
        last_requested=last,
        matches=matches,
        aggregate=aggregate_matches(matches),
    )


__all__ = [
    "STAT_LABELS",
    "TeamContext",
    "build_team_context",
    "build_match_record",
    "aggregate_matches",
    "pick_stat",
    "safe_avg",
    "to_count",
    "validate_last",
]
