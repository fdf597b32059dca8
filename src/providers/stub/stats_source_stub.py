from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from core.logging import get_logger
from core.normalization import as_int
from providers.api_football.base import StatsSourceBase
from providers.api_football.exceptions import UpstreamError

logger = get_logger("providers.stub.stats_source")


def _team_ids(item: Dict[str, Any]) -> tuple:
    teams = item.get("teams") or {}
    return (
        as_int((teams.get("home") or {}).get("id")),
        as_int((teams.get("away") or {}).get("id")),
    )


def _ts(item: Dict[str, Any]) -> int:
    return as_int((item.get("fixture") or {}).get("timestamp")) or 0


class StubStatsSource(StatsSourceBase):
    """
    Sorgente in memoria con payload fissi (formato API-Football):
    - fixtures: lista item /fixtures
    - statistics / injuries: mappa fixture_id -> lista item
    - teams: lista item /teams (ricerca case-insensitive per sottostringa del nome)
    - fail_*: simula fallimenti del provider sollevando UpstreamError
    NOTA: serve per test e sviluppo offline, non contatta alcun servizio.
    """

    def __init__(
        self,
        fixtures: Optional[Iterable[Dict[str, Any]]] = None,
        statistics: Optional[Dict[int, List[Dict[str, Any]]]] = None,
        injuries: Optional[Dict[int, List[Dict[str, Any]]]] = None,
        teams: Optional[Iterable[Dict[str, Any]]] = None,
        fail_statistics: Optional[Iterable[int]] = None,
        fail_injuries: bool = False,
        fail_fixtures: bool = False,
        fail_search: bool = False,
    ) -> None:
        self.fixtures = list(fixtures or [])
        self.statistics = dict(statistics or {})
        self.injuries = dict(injuries or {})
        self.teams = list(teams or [])
        self.fail_statistics = set(fail_statistics or [])
        self.fail_injuries = fail_injuries
        self.fail_fixtures = fail_fixtures
        self.fail_search = fail_search
        self.calls: List[tuple] = []

    def _check_fixtures(self, path: str) -> None:
        if self.fail_fixtures:
            raise UpstreamError(503, "stub: fixtures non disponibili", path)

    def get_fixture(self, fixture_id: int) -> Optional[Dict[str, Any]]:
        self.calls.append(("fixture", fixture_id))
        self._check_fixtures("/fixtures")
        for item in self.fixtures:
            if as_int((item.get("fixture") or {}).get("id")) == fixture_id:
                return item
        return None

    def get_team_fixtures(
        self,
        team_id: int,
        league_id: int,
        season: int,
        last: int,
    ) -> List[Dict[str, Any]]:
        self.calls.append(("team_fixtures", team_id, league_id, season, last))
        self._check_fixtures("/fixtures")
        out = [
            it
            for it in self.fixtures
            if team_id in _team_ids(it)
            and as_int((it.get("league") or {}).get("id")) == league_id
            and as_int((it.get("league") or {}).get("season")) == season
        ]
        out.sort(key=_ts, reverse=True)
        return out[:last]

    def get_upcoming_fixtures(
        self,
        team_id: int,
        next_n: int,
        league_id: Optional[int] = None,
        season: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self.calls.append(("upcoming", team_id, next_n, league_id, season))
        self._check_fixtures("/fixtures")
        out = []
        for it in self.fixtures:
            league = it.get("league") or {}
            if team_id not in _team_ids(it):
                continue
            if league_id is not None and as_int(league.get("id")) != league_id:
                continue
            if season is not None and as_int(league.get("season")) != season:
                continue
            out.append(it)
        out.sort(key=_ts)
        return out[:next_n]

    def list_fixtures(
        self,
        *,
        date: Optional[str] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        next_n: Optional[int] = None,
        league_id: Optional[int] = None,
        season: Optional[int] = None,
        team_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        self.calls.append(("list", date, date_from, date_to, next_n, league_id, season, team_id))
        self._check_fixtures("/fixtures")
        out = []
        for it in self.fixtures:
            league = it.get("league") or {}
            day = str((it.get("fixture") or {}).get("date") or "")[:10]
            if league_id is not None and as_int(league.get("id")) != league_id:
                continue
            if season is not None and as_int(league.get("season")) != season:
                continue
            if team_id is not None and team_id not in _team_ids(it):
                continue
            if date and day != date:
                continue
            if not date and date_from and date_to and not (date_from <= day <= date_to):
                continue
            out.append(it)
        out.sort(key=_ts)
        if not date and not (date_from and date_to) and next_n is not None:
            out = out[:next_n]
        return out

    def get_fixture_statistics(self, fixture_id: int) -> List[Dict[str, Any]]:
        self.calls.append(("statistics", fixture_id))
        if fixture_id in self.fail_statistics:
            raise UpstreamError(500, "stub: statistics non disponibili", "/fixtures/statistics")
        return list(self.statistics.get(fixture_id, []))

    def get_fixture_injuries(self, fixture_id: int) -> List[Dict[str, Any]]:
        self.calls.append(("injuries", fixture_id))
        if self.fail_injuries:
            raise UpstreamError(500, "stub: injuries non disponibili", "/injuries")
        return list(self.injuries.get(fixture_id, []))

    def search_teams(self, name: str) -> List[Dict[str, Any]]:
        self.calls.append(("search", name))
        if self.fail_search:
            raise UpstreamError(503, "stub: ricerca squadre non disponibile", "/teams")
        needle = name.strip().lower()
        return [
            t for t in self.teams
            if needle and needle in str((t.get("team") or {}).get("name") or "").lower()
        ]


__all__ = ["StubStatsSource"]
