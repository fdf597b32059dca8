from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from core.config import NEXT_MAX, NEXT_MIN, get_settings
from core.errors import FixtureNotFoundError, MalformedInputError, TeamNotFoundError
from core.logging import get_logger
from core.models import FixtureRef, ResolvedPair
from core.normalization import as_int, clean_fixture, fixture_ref_from_api
from providers.api_football.base import StatsSourceBase
from providers.api_football.exceptions import UpstreamError

logger = get_logger("resolver.fixture_resolver")

# Separatori "parola" prima, poi " - " spaziato, il trattino nudo solo come ripiego
# (es. "Paris Saint-Germain - Lyon")
_WORD_SEP_RE = re.compile(r"^\s*(.+?)\s+(?:vs|v|contra)\.?\s+(.+?)\s*$", re.IGNORECASE)
_SPACED_DASH_RE = re.compile(r"^\s*(.+?)\s+-\s+(.+?)\s*$")
_DASH_SEP_RE = re.compile(r"^\s*(.+?)\s*-\s*(.+?)\s*$")

MIN_SEARCH_LEN = 2


@dataclass
class FixtureDetail:
    ref: FixtureRef
    fixture: Dict[str, Any]
    injuries: List[Dict[str, Any]] = field(default_factory=list)
    statistics_by_team: Dict[str, Any] = field(default_factory=dict)
    extras_loaded: bool = False

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"fixture": self.fixture}
        if self.extras_loaded:
            out["injuries"] = self.injuries
            out["statistics_by_team"] = self.statistics_by_team
            out["notes"] = {
                "statistics_available": bool(self.statistics_by_team),
                "injuries_available": bool(self.injuries),
            }
        return out


def parse_vs_query(q: Optional[str]) -> Tuple[str, str]:
    """'Squadra A vs Squadra B' -> ('Squadra A', 'Squadra B')."""
    s = (q or "").strip()
    if not s:
        raise MalformedInputError("Query vuota. Usa 'Squadra A vs Squadra B'.")
    m = _WORD_SEP_RE.match(s) or _SPACED_DASH_RE.match(s) or _DASH_SEP_RE.match(s)
    if not m:
        raise MalformedInputError(
            "Formato non valido. Usa 'Squadra A vs Squadra B'.",
            details={"query": s},
        )
    home, away = m.group(1).strip(), m.group(2).strip()
    if not home or not away:
        raise MalformedInputError(
            "Entrambe le squadre devono essere indicate.",
            details={"query": s},
        )
    return home, away


def validate_next(next_n: Any = None) -> int:
    if next_n is None:
        return get_settings().resolver_default_next
    try:
        n = int(next_n)
    except (TypeError, ValueError) as e:
        raise MalformedInputError(f"next deve essere un intero (valore: {next_n!r})") from e
    if not NEXT_MIN <= n <= NEXT_MAX:
        raise MalformedInputError(
            f"next fuori range [{NEXT_MIN}, {NEXT_MAX}] (valore: {n})",
            details={"next": n},
        )
    return n


def resolve_team_id(source: StatsSourceBase, name: str, side: str) -> int:
    """Primo risultato della ricerca per nome (approssimazione nota)."""
    results = source.search_teams(name)
    for item in results[:1]:
        team_id = as_int((item.get("team") or {}).get("id"))
        if team_id is not None:
            logger.info("Squadra risolta %r -> %s", name, team_id, extra={"side": side, "team_id": team_id})
            return team_id
    raise TeamNotFoundError(side, name)


def pick_best_fixture(refs: Sequence[FixtureRef]) -> Optional[FixtureRef]:
    """
    Preferisce fixture non terminate; tra queste (o tra tutte, se nessuna)
    sceglie il kickoff più vicino. Fixture senza timestamp vanno in coda.
    """
    if not refs:
        return None
    open_refs = [r for r in refs if not r.status.is_terminal]
    pool = open_refs or list(refs)
    return min(pool, key=lambda r: r.timestamp if r.timestamp is not None else math.inf)


def resolve_by_query(
    source: StatsSourceBase,
    query: str,
    league_id: Optional[int] = None,
    season: Optional[int] = None,
    next_n: Optional[int] = None,
) -> ResolvedPair:
    home_name, away_name = parse_vs_query(query)
    window = validate_next(next_n)

    home_id = resolve_team_id(source, home_name, "home")
    away_id = resolve_team_id(source, away_name, "away")

    upcoming = source.get_upcoming_fixtures(home_id, window, league_id=league_id, season=season)

    candidates: List[FixtureRef] = []
    cleaned: List[Dict[str, Any]] = []
    for item in upcoming:
        ref = fixture_ref_from_api(item)
        if ref is None or not ref.has_pair(home_id, away_id):
            continue
        candidates.append(ref)
        cleaned.append(clean_fixture(item))

    best = pick_best_fixture(candidates)
    logger.info(
        "Query %r: %d fixture candidate, best=%s",
        query,
        len(candidates),
        best.fixture_id if best else None,
        extra={"count": len(candidates)},
    )
    return ResolvedPair(
        home_team_id=home_id,
        away_team_id=away_id,
        candidates=candidates,
        best=best,
        cleaned=cleaned,
    )


def resolve_by_id(
    source: StatsSourceBase,
    fixture_id: Any,
    include_extras: bool = True,
) -> FixtureDetail:
    fid = as_int(fixture_id)
    if fid is None:
        raise MalformedInputError(f"fixture id non valido: {fixture_id!r}")

    item = source.get_fixture(fid)
    ref = fixture_ref_from_api(item) if item else None
    if item is None or ref is None:
        raise FixtureNotFoundError(f"Fixture {fid} non trovata", details={"fixture_id": fid})

    detail = FixtureDetail(ref=ref, fixture=clean_fixture(item))
    if not include_extras:
        return detail

    detail.extras_loaded = True
    detail.injuries = fetch_injuries(source, fid)
    try:
        stats = source.get_fixture_statistics(fid)
    except UpstreamError as exc:
        logger.warning("Statistiche fixture non disponibili: %s", exc, extra={"fixture_id": fid})
        stats = []
    for block in stats:
        team_id = ((block or {}).get("team") or {}).get("id")
        if team_id is None:
            continue
        detail.statistics_by_team[str(team_id)] = block.get("statistics") or []
    return detail


def fetch_injuries(source: StatsSourceBase, fixture_id: int) -> List[Dict[str, Any]]:
    """Infortuni della fixture; dato ausiliario, un fallimento diventa lista vuota."""
    try:
        return source.get_fixture_injuries(fixture_id)
    except UpstreamError as exc:
        logger.warning("Infortuni non disponibili: %s", exc, extra={"fixture_id": fixture_id})
        return []


def search_teams_clean(source: StatsSourceBase, search: Optional[str]) -> List[Dict[str, Any]]:
    term = (search or "").strip()
    if len(term) < MIN_SEARCH_LEN:
        raise MalformedInputError(
            f"Ricerca squadra troppo corta (minimo {MIN_SEARCH_LEN} caratteri)",
            details={"search": term},
        )
    out: List[Dict[str, Any]] = []
    for item in source.search_teams(term):
        team = item.get("team") or {}
        out.append(
            {
                "id": team.get("id"),
                "name": team.get("name"),
                "code": team.get("code"),
                "country": team.get("country"),
                "founded": team.get("founded"),
                "logo": team.get("logo"),
            }
        )
    return out


def list_fixtures_clean(
    source: StatsSourceBase,
    *,
    date: Optional[str] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    next_n: Optional[int] = None,
    league_id: Optional[int] = None,
    season: Optional[int] = None,
    team_id: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Modalità lista: date > intervallo from/to > next."""
    has_range = bool(date_from and date_to)
    if not date and not has_range and next_n is None:
        raise MalformedInputError(
            "Serve date=YYYY-MM-DD, oppure from/to, oppure next (o q='Squadra A vs Squadra B')"
        )
    window = None
    if not date and not has_range:
        window = validate_next(next_n)

    items = source.list_fixtures(
        date=date or None,
        date_from=date_from if has_range and not date else None,
        date_to=date_to if has_range and not date else None,
        next_n=window,
        league_id=league_id,
        season=season,
        team_id=team_id,
    )
    return [clean_fixture(it) for it in items]


__all__ = [
    "FixtureDetail",
    "parse_vs_query",
    "validate_next",
    "resolve_team_id",
    "pick_best_fixture",
    "resolve_by_query",
    "resolve_by_id",
    "fetch_injuries",
    "search_teams_clean",
    "list_fixtures_clean",
]
