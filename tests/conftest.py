import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402
from core.config import _reset_settings_cache_for_tests  # noqa: E402
from providers.stub.stats_source_stub import StubStatsSource  # noqa: E402

LEAGUE = 140
SEASON = 2025
REAL_MADRID = 541
REAL_SOCIEDAD = 548


@pytest.fixture(autouse=True)
def reset_settings_cache(monkeypatch):
    monkeypatch.setenv("API_FOOTBALL_KEY", "DUMMY")
    _reset_settings_cache_for_tests()
    yield
    _reset_settings_cache_for_tests()


def make_fixture(fid, home, away, goals=(None, None), status="FT", ts=0, league=LEAGUE, season=SEASON):
    """Item /fixtures in formato API-Football."""
    home_id, home_name = home
    away_id, away_name = away
    return {
        "fixture": {
            "id": fid,
            "date": "2025-10-01T19:00:00+00:00",
            "timestamp": ts,
            "status": {"short": status},
            "venue": {"id": 1, "name": "Stadio", "city": "Città"},
        },
        "league": {"id": league, "name": "La Liga", "country": "Spain", "season": season, "round": "R1"},
        "teams": {
            "home": {"id": home_id, "name": home_name},
            "away": {"id": away_id, "name": away_name},
        },
        "goals": {"home": goals[0], "away": goals[1]},
    }


def make_team_stats(team_id, shots, on_target, corners, yellow, red):
    return {
        "team": {"id": team_id},
        "statistics": [
            {"type": "Shots on Goal", "value": on_target},
            {"type": "Total Shots", "value": shots},
            {"type": "Corner Kicks", "value": corners},
            {"type": "Yellow Cards", "value": yellow},
            {"type": "Red Cards", "value": red},
        ],
    }


@pytest.fixture
def fixture_factory():
    return make_fixture


@pytest.fixture
def stats_factory():
    return make_team_stats


@pytest.fixture
def laliga_source():
    """
    Real Madrid (541) - Real Sociedad (548), due partite concluse a testa.
    Medie attese:
      541: gol 1.5/1.0, tiri 13/11, corner 6/5, gialli 1.5/2.5
      548: gol 1.0/1.5, tiri 10/8, corner 6/3, gialli 3/2 (fixture 22 senza statistiche)
    """
    rm = (REAL_MADRID, "Real Madrid")
    rs = (REAL_SOCIEDAD, "Real Sociedad")
    fixtures = [
        make_fixture(11, rm, (530, "Atletico Madrid"), goals=(2, 1), ts=100),
        make_fixture(12, (529, "Barcelona"), rm, goals=(1, 1), ts=200),
        make_fixture(21, rs, (533, "Villarreal"), goals=(0, 0), ts=150),
        make_fixture(22, (536, "Sevilla"), rs, goals=(3, 2), ts=250),
        make_fixture(1001, rm, rs, status="NS", ts=1000),
        make_fixture(1002, rs, rm, status="NS", ts=2000),
        make_fixture(1003, rm, (530, "Atletico Madrid"), status="NS", ts=500),
    ]
    statistics = {
        11: [make_team_stats(541, 15, 6, 7, 2, 0), make_team_stats(530, 9, 3, 4, 3, 1)],
        12: [make_team_stats(529, 13, 5, 6, 2, 0), make_team_stats(541, 11, 4, 5, 1, 0)],
        21: [make_team_stats(548, 10, 2, 6, 3, 0), make_team_stats(533, 8, 2, 3, 2, 0)],
    }
    injuries = {
        1001: [
            {"player": {"id": 1, "name": "P1", "type": "Missing Fixture", "reason": "Knee Injury"}, "team": {"id": 541}},
            {"player": {"id": 2, "name": "P2", "type": "Questionable", "reason": "Illness"}, "team": {"id": 548}},
            {"player": {"id": 3, "name": "P3", "type": "Missing Fixture", "reason": "Red Card"}, "team": {"id": 548}},
        ]
    }
    teams = [
        {"team": {"id": 541, "name": "Real Madrid", "code": "REA", "country": "Spain", "founded": 1902}},
        {"team": {"id": 548, "name": "Real Sociedad", "code": "RSO", "country": "Spain", "founded": 1909}},
        {"team": {"id": 530, "name": "Atletico Madrid", "code": "MAD", "country": "Spain", "founded": 1903}},
    ]
    return StubStatsSource(
        fixtures=fixtures,
        statistics=statistics,
        injuries=injuries,
        teams=teams,
        fail_statistics={22},
    )
