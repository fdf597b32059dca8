from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_stats_source
from core.logging import get_logger
from providers.api_football.base import StatsSourceBase
from resolver.fixture_resolver import list_fixtures_clean, resolve_by_id, resolve_by_query

router = APIRouter(tags=["fixtures"])
logger = get_logger("api.routes.fixtures")


@router.get("/fixtures", summary="Lista fixtures o risoluzione 'A vs B'")
def get_fixtures(
    q: Optional[str] = Query(None, description="Squadra A vs Squadra B"),
    date: Optional[str] = Query(None, description="YYYY-MM-DD"),
    date_from: Optional[str] = Query(None, alias="from"),
    date_to: Optional[str] = Query(None, alias="to"),
    next_n: Optional[int] = Query(None, alias="next"),
    league: Optional[int] = Query(None),
    season: Optional[int] = Query(None),
    team: Optional[int] = Query(None),
    source: StatsSourceBase = Depends(get_stats_source),
):
    """
    Due modalità:
    - q presente: risolve la coppia di squadre e ritorna le fixture condivise
      con la migliore (prossimo kickoff non terminato) in evidenza
    - altrimenti lista con priorità date > from/to > next
    """
    if q is not None:
        pair = resolve_by_query(source, q, league_id=league, season=season, next_n=next_n)
        return {
            "mode": "query",
            "query": q,
            "home_team_id": pair.home_team_id,
            "away_team_id": pair.away_team_id,
            "best_fixture_id": pair.best_fixture_id,
            "count": len(pair.cleaned),
            "items": pair.cleaned,
        }

    items = list_fixtures_clean(
        source,
        date=date,
        date_from=date_from,
        date_to=date_to,
        next_n=next_n,
        league_id=league,
        season=season,
        team_id=team,
    )
    return {"mode": "list", "count": len(items), "items": items}


@router.get("/fixture", summary="Dettaglio fixture con infortuni e statistiche")
def get_fixture(
    fixture_id: str = Query(..., alias="id"),
    source: StatsSourceBase = Depends(get_stats_source),
):
    return resolve_by_id(source, fixture_id, include_extras=True).to_dict()
