from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Mapping, Optional, Sequence

from context.team_context import build_team_context, validate_last
from core.config import get_settings
from core.errors import FixtureNotFoundError, MalformedInputError, MatchlineError
from core.logging import get_logger
from core.models import FixtureRef
from core.normalization import as_int
from monitoring.prometheus_exporter import record_prediction
from predictions.markets import (
    PoissonMarketModel,
    default_market_lines,
    normalize_profile,
    validate_markets,
)
from providers.api_football.base import StatsSourceBase
from providers.api_football.exceptions import UpstreamError
from resolver.fixture_resolver import (
    fetch_injuries,
    resolve_by_id,
    resolve_by_query,
    validate_next,
)

logger = get_logger("predictions.pipeline")

DISCLAIMER = (
    "Modello probabilistico orientativo (media simmetrica + Poisson): "
    "non garantisce risultati."
)


def openness_label(expected_goals: Optional[float]) -> Optional[str]:
    if expected_goals is None:
        return None
    if expected_goals >= 3.0:
        return "open"
    if expected_goals >= 2.2:
        return "balanced"
    return "closed"


def injury_counts(injuries: List[Dict[str, Any]], home_id: Optional[int], away_id: Optional[int]) -> Dict[str, int]:
    counts = {"home_missing": 0, "home_questionable": 0, "away_missing": 0, "away_questionable": 0}
    for it in injuries:
        team_id = as_int((it.get("team") or {}).get("id"))
        kind = str((it.get("player") or {}).get("type") or it.get("type") or "").lower()
        if team_id is None or team_id not in (home_id, away_id):
            continue
        side = "home" if team_id == home_id else "away"
        if "missing" in kind:
            counts[f"{side}_missing"] += 1
        elif "questionable" in kind:
            counts[f"{side}_questionable"] += 1
    return counts


def _resolve_fixture(
    source: StatsSourceBase,
    fixture_id: Any,
    query: Optional[str],
    league_id: Optional[int],
    season: Optional[int],
    next_n: Optional[int],
) -> tuple:
    if fixture_id is not None:
        detail = resolve_by_id(source, fixture_id, include_extras=False)
        return detail.ref, detail.fixture

    pair = resolve_by_query(source, query or "", league_id=league_id, season=season, next_n=next_n)
    if pair.best is None:
        raise FixtureNotFoundError(
            "Nessuna fixture in programma per la coppia di squadre",
            details={"query": query, "home_id": pair.home_team_id, "away_id": pair.away_team_id},
        )
    fixture = next(
        (fx for fx in pair.cleaned if fx.get("fixture_id") == pair.best.fixture_id),
        {"fixture_id": pair.best.fixture_id},
    )
    return pair.best, fixture


def predict_match(
    source: StatsSourceBase,
    fixture_id: Any = None,
    query: Optional[str] = None,
    league_id: Optional[int] = None,
    season: Optional[int] = None,
    next_n: Optional[int] = None,
    last_n: Optional[int] = None,
    markets: Optional[Mapping[str, Sequence[Any]]] = None,
    profile: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Pipeline completa: fixture (per id o query "A vs B") -> due team context
    in parallelo -> modello Poisson per mercato.
    Gli input vengono validati prima di qualsiasi chiamata al provider.
    """
    settings = get_settings()
    if fixture_id is None and not (query or "").strip():
        raise MalformedInputError("Serve fixture oppure q='Squadra A vs Squadra B'")
    last = validate_last(settings.context_default_last if last_n is None else last_n)
    line_profile = normalize_profile(profile) or settings.market_line_profile
    wanted = validate_markets(markets if markets is not None else default_market_lines(line_profile))
    if fixture_id is None:
        validate_next(next_n)

    try:
        ref, fixture = _resolve_fixture(source, fixture_id, query, league_id, season, next_n)
        result = _predict_for(source, ref, fixture, last, wanted)
    except (MatchlineError, UpstreamError):
        record_prediction("error")
        raise
    record_prediction("ok")
    result["inputs"] = {
        "fixture": fixture_id,
        "query": query,
        "last": last,
        "profile": line_profile if markets is None else None,
    }
    return result


def _predict_for(
    source: StatsSourceBase,
    ref: FixtureRef,
    fixture: Dict[str, Any],
    last: int,
    markets: Mapping[str, Sequence[float]],
) -> Dict[str, Any]:
    if ref.home_team_id is None or ref.away_team_id is None or ref.league_id is None or ref.season is None:
        raise UpstreamError(None, f"Fixture {ref.fixture_id} incompleta (squadre/lega/stagione)", "/fixtures")

    with ThreadPoolExecutor(max_workers=3, thread_name_prefix="match") as pool:
        home_f = pool.submit(build_team_context, source, ref.home_team_id, ref.league_id, ref.season, last)
        away_f = pool.submit(build_team_context, source, ref.away_team_id, ref.league_id, ref.season, last)
        inj_f = pool.submit(fetch_injuries, source, ref.fixture_id)
        home_ctx = home_f.result()
        away_ctx = away_f.result()
        injuries = inj_f.result()

    model = PoissonMarketModel()
    preds = model.predict(home_ctx.aggregate, away_ctx.aggregate, markets)
    logger.info(
        "Previsione calcolata: %d/%d mercati",
        len(preds),
        len(markets),
        extra={"fixture_id": ref.fixture_id, "count": len(preds)},
    )

    expected = {name: round(p.expected_total, 2) for name, p in preds.items()}
    goals = preds.get("goals")
    return {
        "fixture": fixture,
        "model_version": model.version,
        "summary": {
            "expected": expected,
            "openness": openness_label(goals.expected_total if goals else None),
        },
        "markets": {name: p.to_dict() for name, p in preds.items()},
        "context": {
            "injuries": injury_counts(injuries, ref.home_team_id, ref.away_team_id),
            "aggregates": {
                "home": home_ctx.aggregate.to_dict(),
                "away": away_ctx.aggregate.to_dict(),
            },
        },
        "disclaimer": DISCLAIMER,
    }


__all__ = ["predict_match", "openness_label", "injury_counts", "DISCLAIMER"]
