from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from api.deps import get_stats_source
from core.config import get_settings
from core.errors import MalformedInputError
from predictions.markets import default_market_lines
from predictions.pipeline import predict_match
from providers.api_football.base import StatsSourceBase

router = APIRouter(prefix="/predict", tags=["predict"])


@router.get("/match", summary="Previsione over/under per una fixture")
def predict(
    fixture: Optional[str] = Query(None, description="ID fixture"),
    q: Optional[str] = Query(None, description="Squadra A vs Squadra B"),
    league: Optional[int] = Query(None),
    season: Optional[int] = Query(None),
    next_n: Optional[int] = Query(None, alias="next"),
    last: Optional[int] = Query(None),
    profile: Optional[str] = Query(None, description="normal | wide"),
    markets: Optional[str] = Query(None, description="Sottoinsieme mercati, es. goals,corners"),
    source: StatsSourceBase = Depends(get_stats_source),
):
    """
    Linee dal profilo richiesto (default MARKET_LINE_PROFILE); `markets`
    restringe i mercati calcolati. fixture ha precedenza su q.
    """
    selected = None
    if markets:
        lines = default_market_lines(profile or get_settings().market_line_profile)
        names = [m.strip() for m in markets.split(",") if m.strip()]
        unknown = [m for m in names if m not in lines]
        if unknown:
            raise MalformedInputError(
                f"Mercati non disponibili nel profilo: {', '.join(unknown)}",
                details={"markets": unknown, "allowed": sorted(lines)},
            )
        selected = {m: lines[m] for m in names}

    return predict_match(
        source,
        fixture_id=fixture,
        query=q,
        league_id=league,
        season=season,
        next_n=next_n,
        last_n=last,
        markets=selected,
        profile=profile,
    )
