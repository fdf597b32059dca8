from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class StatsSourceBase(ABC):
    """
    Interfaccia astratta di una sorgente dati partite.

    Le implementazioni restituiscono gli item grezzi del provider (formato API-Football:
    fixture/league/teams/goals, statistics, injuries, team). Una lista vuota è un
    risultato valido ("nessun dato pubblicato"); i fallimenti vengono sollevati
    come UpstreamError.
    """

    @abstractmethod
    def get_fixture(self, fixture_id: int) -> Optional[Dict[str, Any]]:
        """Fixture per id; None se il provider non restituisce alcun item."""
        raise NotImplementedError

    @abstractmethod
    def get_team_fixtures(
        self,
        team_id: int,
        league_id: int,
        season: int,
        last: int,
    ) -> List[Dict[str, Any]]:
        """Ultime `last` fixtures della squadra in lega/stagione."""
        raise NotImplementedError

    @abstractmethod
    def get_upcoming_fixtures(
        self,
        team_id: int,
        next_n: int,
        league_id: Optional[int] = None,
        season: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
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
        raise NotImplementedError

    @abstractmethod
    def get_fixture_statistics(self, fixture_id: int) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def get_fixture_injuries(self, fixture_id: int) -> List[Dict[str, Any]]:
        raise NotImplementedError

    @abstractmethod
    def search_teams(self, name: str) -> List[Dict[str, Any]]:
        raise NotImplementedError
