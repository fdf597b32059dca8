from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

# Metriche per-partita; "goals" arriva dal record fixture, le altre dalle statistiche
METRICS: Tuple[str, ...] = (
    "goals",
    "shots",
    "shots_on_target",
    "corners",
    "yellow_cards",
    "red_cards",
)
STAT_METRICS: Tuple[str, ...] = METRICS[1:]
SIDES: Tuple[str, ...] = ("for", "against")


class FixtureStatus(str, Enum):
    SCHEDULED = "scheduled"
    IN_PLAY = "in_play"
    FINISHED = "finished"
    OTHER_TERMINAL = "other_terminal"

    @property
    def is_terminal(self) -> bool:
        return self in (FixtureStatus.FINISHED, FixtureStatus.OTHER_TERMINAL)


@dataclass(frozen=True)
class FixtureRef:
    fixture_id: int
    timestamp: Optional[int]
    status: FixtureStatus
    status_short: Optional[str]
    league_id: Optional[int]
    season: Optional[int]
    home_team_id: Optional[int]
    away_team_id: Optional[int]

    def has_pair(self, team_a: int, team_b: int) -> bool:
        pair = (self.home_team_id, self.away_team_id)
        return pair == (team_a, team_b) or pair == (team_b, team_a)


@dataclass
class TeamMatchRecord:
    fixture_id: Optional[int]
    date: Optional[str]
    status: Optional[str]
    is_home: bool
    opponent_id: Optional[int]
    opponent_name: Optional[str]
    goals_for: Optional[int] = None
    goals_against: Optional[int] = None
    shots_for: Optional[int] = None
    shots_against: Optional[int] = None
    shots_on_target_for: Optional[int] = None
    shots_on_target_against: Optional[int] = None
    corners_for: Optional[int] = None
    corners_against: Optional[int] = None
    yellow_cards_for: Optional[int] = None
    yellow_cards_against: Optional[int] = None
    red_cards_for: Optional[int] = None
    red_cards_against: Optional[int] = None

    def value(self, metric: str, side: str) -> Optional[int]:
        return getattr(self, f"{metric}_{side}")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "fixture_id": self.fixture_id,
            "date": self.date,
            "status": self.status,
            "is_home": self.is_home,
            "opponent": {"id": self.opponent_id, "name": self.opponent_name},
        }
        for metric in METRICS:
            for side in SIDES:
                out[f"{metric}_{side}"] = self.value(metric, side)
        return out


@dataclass
class TeamAggregate:
    """
    Profilo medio di una squadra sulle ultime N partite.
    Ogni media è None se nessuna partita ha fornito un valore (mai 0 per "nessun dato").
    """

    match_count: int
    averages: Dict[str, Optional[float]] = field(default_factory=dict)

    def avg(self, metric: str, side: str) -> Optional[float]:
        return self.averages.get(f"{metric}_{side}")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"match_count": self.match_count}
        for metric in METRICS:
            for side in SIDES:
                out[f"{metric}_{side}_avg"] = self.avg(metric, side)
        return out


def to_pct(p: float) -> float:
    return round(p * 1000) / 10


def fair_odd(p: float) -> Optional[float]:
    """Quota giusta 1/p; None (non inf, non 0) quando p <= 0."""
    if p <= 0:
        return None
    return 1.0 / p


def _rounded_odd(p: float) -> Optional[float]:
    odd = fair_odd(p)
    return None if odd is None else round(odd, 2)


@dataclass(frozen=True)
class MarketLine:
    line: float
    over: float
    under: float

    @property
    def over_fair_odd(self) -> Optional[float]:
        return fair_odd(self.over)

    @property
    def under_fair_odd(self) -> Optional[float]:
        return fair_odd(self.under)

    def to_dict(self) -> Dict[str, Any]:
        # Arrotondamento solo in presentazione
        return {
            "line": self.line,
            "over": {"p": to_pct(self.over), "fair_odd": _rounded_odd(self.over)},
            "under": {"p": to_pct(self.under), "fair_odd": _rounded_odd(self.under)},
        }


@dataclass(frozen=True)
class MarketPrediction:
    market: str
    expected_total: float
    lines: Tuple[MarketLine, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "expected_total": round(self.expected_total, 2),
            "lines": [ln.to_dict() for ln in self.lines],
        }


@dataclass
class ResolvedPair:
    home_team_id: int
    away_team_id: int
    candidates: List[FixtureRef]
    best: Optional[FixtureRef]
    cleaned: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def best_fixture_id(self) -> Optional[int]:
        return self.best.fixture_id if self.best else None


__all__ = [
    "METRICS",
    "STAT_METRICS",
    "SIDES",
    "FixtureStatus",
    "FixtureRef",
    "TeamMatchRecord",
    "TeamAggregate",
    "MarketLine",
    "MarketPrediction",
    "ResolvedPair",
    "fair_odd",
    "to_pct",
]
