from __future__ import annotations

from providers.api_football.base import StatsSourceBase
from providers.api_football.stats_provider import ApiFootballStatsSource


def get_stats_source() -> StatsSourceBase:
    """
    Sorgente dati per le route (sovrascrivibile con app.dependency_overrides).
    Nessuna cache: ogni richiesta usa un client nuovo.
    """
    return ApiFootballStatsSource()
