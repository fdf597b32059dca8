from __future__ import annotations

from typing import Any, Dict, List, Optional

from core.logging import get_logger
from .base import StatsSourceBase
from .exceptions import UpstreamError
from .http_client import APIFootballHttpClient, get_http_client

log = get_logger(__name__)


class ApiFootballStatsSource(StatsSourceBase):
    """
    Adapter API-Football (v3).
    - Usa APIFootballHttpClient (requests, nessun retry)
    - Restituisce la lista 'response' grezza di ciascun endpoint
    - 'response' non lista => payload malformato => UpstreamError
    """

    def __init__(self, client: Optional[APIFootballHttpClient] = None) -> None:
        self._client = client or get_http_client()

    def _response(self, path: str, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        raw = self._client.api_get(path, params=params)
        response = raw.get("response", [])
        if response is None:
            return []
        if not isinstance(response, list):
            log.warning("Formato inatteso: 'response' non è una lista", extra={"path": path})
            raise UpstreamError(None, "Formato inatteso: 'response' non è una lista", path)
        return response

    def get_fixture(self, fixture_id: int) -> Optional[Dict[str, Any]]:
        response = self._response("/fixtures", {"id": fixture_id})
        return response[0] if response else None

    def get_team_fixtures(
        self,
        team_id: int,
        league_id: int,
        season: int,
        last: int,
    ) -> List[Dict[str, Any]]:
        params = {"team": team_id, "league": league_id, "season": season, "last": last}
        return self._response("/fixtures", params)

    def get_upcoming_fixtures(
        self,
        team_id: int,
        next_n: int,
        league_id: Optional[int] = None,
        season: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        params: Dict[str, Any] = {"team": team_id, "next": next_n}
        if league_id is not None:
            params["league"] = league_id
        if season is not None:
            params["season"] = season
        return self._response("/fixtures", params)

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
        params: Dict[str, Any] = {}
        if league_id is not None:
            params["league"] = league_id
        if season is not None:
            params["season"] = season
        if team_id is not None:
            params["team"] = team_id
        # priorità: date > range > next
        if date:
            params["date"] = date
        elif date_from and date_to:
            params["from"] = date_from
            params["to"] = date_to
        elif next_n is not None:
            params["next"] = next_n
        return self._response("/fixtures", params)

    def get_fixture_statistics(self, fixture_id: int) -> List[Dict[str, Any]]:
        return self._response("/fixtures/statistics", {"fixture": fixture_id})

    def get_fixture_injuries(self, fixture_id: int) -> List[Dict[str, Any]]:
        return self._response("/injuries", {"fixture": fixture_id})

    def search_teams(self, name: str) -> List[Dict[str, Any]]:
        return self._response("/teams", {"search": name.strip()})

    def get_last_stats(self) -> Dict[str, Any]:
        return self._client.get_stats()


__all__ = ["ApiFootballStatsSource"]
