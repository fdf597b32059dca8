from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_stats_source
from context.team_context import build_team_context
from providers.api_football.base import StatsSourceBase
from resolver.fixture_resolver import search_teams_clean

router = APIRouter(tags=["teams"])


@router.get("/teams", summary="Ricerca squadre per nome")
def search_teams(
    search: Optional[str] = Query(None, description="Almeno 2 caratteri"),
    source: StatsSourceBase = Depends(get_stats_source),
):
    items = search_teams_clean(source, search)
    return {"count": len(items), "items": items}


@router.get("/team-context", summary="Medie recenti di una squadra")
def team_context(
    team: int = Query(...),
    league: int = Query(...),
    season: int = Query(...),
    last: Optional[int] = Query(None, description="Partite concluse da considerare (1-20)"),
    source: StatsSourceBase = Depends(get_stats_source),
):
    return build_team_context(source, team, league, season, last).to_dict()
