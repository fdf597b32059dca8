from __future__ import annotations

import re
from datetime import datetime
from typing import Any, Dict, Optional

from core.logging import get_logger
from core.models import FixtureRef, FixtureStatus

logger = get_logger("core.normalization")

# Pattern ISO 8601 semplice: YYYY-MM-DDTHH:MM:SS (accetta suffisso Z o offset)
_ISO_DATETIME_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:Z|[+-]\d{2}:\d{2})?$"
)

# Codici "short" di API-Football
_SCHEDULED = {"TBD", "NS", "PST"}
_IN_PLAY = {"1H", "HT", "2H", "ET", "BT", "P", "SUSP", "INT", "LIVE"}
_FINISHED = {"FT", "AET", "PEN"}


def as_int(v: Any) -> Optional[int]:
    try:
        return int(v) if v is not None else None
    except (ValueError, TypeError):
        return None


def classify_status(short: Optional[str]) -> FixtureStatus:
    """Mappa lo status short del provider; codici sconosciuti o vuoti contano come terminali."""
    code = (short or "").strip().upper()
    if code in _SCHEDULED:
        return FixtureStatus.SCHEDULED
    if code in _IN_PLAY:
        return FixtureStatus.IN_PLAY
    if code in _FINISHED:
        return FixtureStatus.FINISHED
    return FixtureStatus.OTHER_TERMINAL


def _timestamp_from(fixture: Dict[str, Any]) -> Optional[int]:
    ts = as_int(fixture.get("timestamp"))
    if ts is not None:
        return ts
    date_raw = fixture.get("date")
    if not date_raw or not _ISO_DATETIME_RE.match(str(date_raw)):
        return None
    try:
        return int(datetime.fromisoformat(str(date_raw).replace("Z", "+00:00")).timestamp())
    except ValueError:
        logger.warning("Data fixture non interpretabile: %s", date_raw)
        return None


def fixture_ref_from_api(item: Dict[str, Any]) -> Optional[FixtureRef]:
    """Record grezzo API-Football -> FixtureRef. None se manca l'id fixture."""
    fixture = item.get("fixture") or {}
    league = item.get("league") or {}
    teams = item.get("teams") or {}

    fixture_id = as_int(fixture.get("id"))
    if fixture_id is None:
        return None
    status_short = (fixture.get("status") or {}).get("short")
    return FixtureRef(
        fixture_id=fixture_id,
        timestamp=_timestamp_from(fixture),
        status=classify_status(status_short),
        status_short=status_short,
        league_id=as_int(league.get("id")),
        season=as_int(league.get("season")),
        home_team_id=as_int((teams.get("home") or {}).get("id")),
        away_team_id=as_int((teams.get("away") or {}).get("id")),
    )


def clean_fixture(item: Dict[str, Any]) -> Dict[str, Any]:
    """
    Vista denormalizzata di una fixture (squadre, lega, stadio, gol)
    usata nelle risposte verso il chiamante.
    """
    fixture = item.get("fixture") or {}
    league = item.get("league") or {}
    teams = item.get("teams") or {}
    goals = item.get("goals") or {}
    venue = fixture.get("venue") or {}
    home = teams.get("home") or {}
    away = teams.get("away") or {}

    return {
        "fixture_id": fixture.get("id"),
        "date": fixture.get("date"),
        "timestamp": fixture.get("timestamp"),
        "status": (fixture.get("status") or {}).get("short"),
        "league": {
            "id": league.get("id"),
            "name": league.get("name"),
            "country": league.get("country"),
            "season": league.get("season"),
            "round": league.get("round"),
        },
        "venue": {
            "id": venue.get("id"),
            "name": venue.get("name"),
            "city": venue.get("city"),
        },
        "teams": {
            "home": {"id": home.get("id"), "name": home.get("name")},
            "away": {"id": away.get("id"), "name": away.get("name")},
        },
        "goals": {"home": goals.get("home"), "away": goals.get("away")},
    }


__all__ = ["as_int", "classify_status", "fixture_ref_from_api", "clean_fixture"]
