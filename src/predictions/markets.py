from __future__ import annotations

import math
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from core.errors import MalformedInputError
from core.models import MarketLine, MarketPrediction, TeamAggregate
from predictions.poisson import over_under

# Mercato -> metrica dell'aggregato
MARKET_METRICS: Dict[str, str] = {
    "goals": "goals",
    "corners": "corners",
    "cards": "yellow_cards",
    "shots": "shots",
    "shots_on_target": "shots_on_target",
    "red_cards": "red_cards",
}

# (from, to, step) per profilo
LINE_RANGES: Dict[str, Dict[str, Tuple[float, float, float]]] = {
    "normal": {
        "goals": (0.5, 8.5, 0.5),
        "shots": (8.5, 40.5, 2),
        "shots_on_target": (1.5, 16.5, 1),
        "corners": (3.5, 16.5, 1),
        "cards": (0.5, 10.5, 1),
        "red_cards": (0.5, 2.5, 1),
    },
    "wide": {
        "goals": (0.5, 10.5, 0.5),
        "shots": (6.5, 48.5, 2),
        "shots_on_target": (0.5, 22.5, 1),
        "corners": (2.5, 20.5, 1),
        "cards": (0.5, 14.5, 1),
        "red_cards": (0.5, 3.5, 1),
    },
}


def make_lines(start: float, stop: float, step: float) -> List[float]:
    out: List[float] = []
    i = 0
    while True:
        x = start + i * step
        if x > stop + 1e-9:
            break
        out.append(round(x * 10) / 10)
        i += 1
    return out


def normalize_profile(profile: Optional[str]) -> str:
    return (profile or "").strip().lower()


def default_market_lines(profile: str = "normal") -> Dict[str, List[float]]:
    ranges = LINE_RANGES.get(normalize_profile(profile))
    if ranges is None:
        raise MalformedInputError(
            f"Profilo linee sconosciuto: {profile!r}",
            details={"profile": profile, "allowed": sorted(LINE_RANGES)},
        )
    return {market: make_lines(*rng) for market, rng in ranges.items()}


def validate_markets(markets: Mapping[str, Sequence[Any]]) -> Dict[str, Tuple[float, ...]]:
    if not markets:
        raise MalformedInputError("Nessun mercato richiesto")
    out: Dict[str, Tuple[float, ...]] = {}
    for name, lines in markets.items():
        if name not in MARKET_METRICS:
            raise MalformedInputError(
                f"Mercato sconosciuto: {name!r}",
                details={"market": name, "allowed": sorted(MARKET_METRICS)},
            )
        if not lines:
            raise MalformedInputError(f"Nessuna linea per il mercato {name!r}", details={"market": name})
        clean: List[float] = []
        for raw in lines:
            try:
                value = float(raw)
            except (TypeError, ValueError) as e:
                raise MalformedInputError(
                    f"Linea non numerica per {name!r}: {raw!r}", details={"market": name}
                ) from e
            if not math.isfinite(value) or value < 0:
                raise MalformedInputError(
                    f"Linea non valida per {name!r}: {raw!r}", details={"market": name}
                )
            clean.append(value)
        out[name] = tuple(clean)
    return out


def expected_total(home: TeamAggregate, away: TeamAggregate, metric: str) -> Optional[float]:
    """
    Media simmetrica:
      home = (home_for + away_against) / 2
      away = (away_for + home_against) / 2
      totale = home + away
    None se manca anche una sola delle quattro medie.
    """
    hf = home.avg(metric, "for")
    ha = home.avg(metric, "against")
    af = away.avg(metric, "for")
    aa = away.avg(metric, "against")
    if hf is None or ha is None or af is None or aa is None:
        return None
    return (hf + aa) / 2 + (af + ha) / 2


def market_lines(lam: float, lines: Sequence[float]) -> Tuple[MarketLine, ...]:
    out = []
    for line in lines:
        over, under = over_under(line, lam)
        out.append(MarketLine(line=line, over=over, under=under))
    return tuple(out)


class PoissonMarketModel:
    """
    Modello MVP: totale atteso per media simmetrica, conteggio Poisson(λ = totale atteso).
    Funzione pura: stessi aggregati in ingresso => stesse linee in uscita.
    """

    def __init__(self, version: str = "poisson-v1") -> None:
        self.version = version

    def predict(
        self,
        home: TeamAggregate,
        away: TeamAggregate,
        markets: Mapping[str, Sequence[Any]],
    ) -> Dict[str, MarketPrediction]:
        wanted = validate_markets(markets)
        out: Dict[str, MarketPrediction] = {}
        for name, lines in wanted.items():
            lam = expected_total(home, away, MARKET_METRICS[name])
            if lam is None:
                # mercato omesso, nessun segnaposto
                continue
            out[name] = MarketPrediction(market=name, expected_total=lam, lines=market_lines(lam, lines))
        return out


def predict_markets(
    home: TeamAggregate,
    away: TeamAggregate,
    markets: Mapping[str, Sequence[Any]],
) -> Dict[str, Dict[str, Any]]:
    preds = PoissonMarketModel().predict(home, away, markets)
    return {name: pred.to_dict() for name, pred in preds.items()}


__all__ = [
    "MARKET_METRICS",
    "LINE_RANGES",
    "make_lines",
    "normalize_profile",
    "default_market_lines",
    "validate_markets",
    "expected_total",
    "market_lines",
    "PoissonMarketModel",
    "predict_markets",
]
