import pytest

from providers.api_football.exceptions import UpstreamError
from providers.api_football.stats_provider import ApiFootballStatsSource


class FakeClient:
    def __init__(self, payloads):
        self.payloads = list(payloads)
        self.calls = []

    def api_get(self, path, params=None):
        self.calls.append((path, params))
        return self.payloads.pop(0)

    def get_stats(self):
        return {"calls": len(self.calls), "latency_ms": 0.0, "last_status": 200}


def test_get_fixture_by_id():
    client = FakeClient([{"response": [{"fixture": {"id": 7}}]}])
    src = ApiFootballStatsSource(client=client)
    assert src.get_fixture(7) == {"fixture": {"id": 7}}
    assert client.calls == [("/fixtures", {"id": 7})]


def test_get_fixture_missing_returns_none():
    src = ApiFootballStatsSource(client=FakeClient([{"response": []}]))
    assert src.get_fixture(7) is None


def test_team_fixtures_params():
    client = FakeClient([{"response": []}])
    ApiFootballStatsSource(client=client).get_team_fixtures(541, 140, 2025, 10)
    assert client.calls[0] == ("/fixtures", {"team": 541, "league": 140, "season": 2025, "last": 10})


def test_upcoming_optional_filters():
    client = FakeClient([{"response": []}, {"response": []}])
    src = ApiFootballStatsSource(client=client)
    src.get_upcoming_fixtures(541, 30)
    src.get_upcoming_fixtures(541, 30, league_id=140, season=2025)
    assert client.calls[0][1] == {"team": 541, "next": 30}
    assert client.calls[1][1] == {"team": 541, "next": 30, "league": 140, "season": 2025}


def test_list_fixtures_date_has_priority():
    client = FakeClient([{"response": []}])
    ApiFootballStatsSource(client=client).list_fixtures(
        date="2025-10-01", date_from="2025-09-01", date_to="2025-09-30", next_n=10, league_id=140
    )
    assert client.calls[0][1] == {"league": 140, "date": "2025-10-01"}


def test_response_not_list_is_upstream_error():
    src = ApiFootballStatsSource(client=FakeClient([{"response": {"oops": True}}]))
    with pytest.raises(UpstreamError):
        src.get_fixture_statistics(1)


def test_endpoints_paths():
    client = FakeClient([{"response": []}] * 3)
    src = ApiFootballStatsSource(client=client)
    src.get_fixture_statistics(5)
    src.get_fixture_injuries(5)
    src.search_teams("  Real ")
    assert [c[0] for c in client.calls] == ["/fixtures/statistics", "/injuries", "/teams"]
    assert client.calls[2][1] == {"search": "Real"}
    assert src.get_last_stats()["calls"] == 3
