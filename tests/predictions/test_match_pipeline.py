import pytest

from core.errors import FixtureNotFoundError, MalformedInputError
from predictions.pipeline import injury_counts, openness_label, predict_match
from providers.api_football.exceptions import UpstreamError
from providers.stub.stats_source_stub import StubStatsSource


def _line(result, market, line):
    return next(ln for ln in result["markets"][market]["lines"] if ln["line"] == line)


def test_predict_by_query_end_to_end(laliga_source):
    result = predict_match(laliga_source, query="Real Madrid vs Real Sociedad", last_n=10)
    assert result["fixture"]["fixture_id"] == 1001
    assert result["summary"]["expected"]["goals"] == 2.5
    assert result["summary"]["expected"]["corners"] == 10.0
    assert result["summary"]["expected"]["cards"] == 4.5
    assert result["summary"]["expected"]["shots"] == 21.0
    assert result["summary"]["openness"] == "balanced"

    goals_25 = _line(result, "goals", 2.5)
    assert goals_25["under"] == {"p": 54.4, "fair_odd": 1.84}
    assert goals_25["over"] == {"p": 45.6, "fair_odd": 2.19}
    assert result["disclaimer"]
    assert result["inputs"]["last"] == 10
    assert result["inputs"]["profile"] == "normal"


def test_predict_by_id_matches_query(laliga_source):
    by_id = predict_match(laliga_source, fixture_id=1001)
    by_query = predict_match(laliga_source, query="Real Madrid vs Real Sociedad")
    assert by_id["markets"] == by_query["markets"]
    # in modalità id niente statistiche della fixture stessa
    assert ("statistics", 1001) not in laliga_source.calls


def test_injuries_are_context_only(laliga_source):
    with_inj = predict_match(laliga_source, fixture_id=1001)
    assert with_inj["context"]["injuries"] == {
        "home_missing": 1,
        "home_questionable": 0,
        "away_missing": 1,
        "away_questionable": 1,
    }
    laliga_source.fail_injuries = True
    without = predict_match(laliga_source, fixture_id=1001)
    assert without["context"]["injuries"]["home_missing"] == 0
    assert without["markets"] == with_inj["markets"]


def test_custom_markets(laliga_source):
    result = predict_match(laliga_source, fixture_id=1001, markets={"goals": [1.5, 2.5], "red_cards": [0.5]})
    assert set(result["markets"]) == {"goals", "red_cards"}
    assert [ln["line"] for ln in result["markets"]["goals"]["lines"]] == [1.5, 2.5]
    assert result["markets"]["red_cards"]["expected_total"] == 0.25
    assert result["inputs"]["profile"] is None


def test_wide_profile_has_more_lines(laliga_source):
    normal = predict_match(laliga_source, fixture_id=1001)
    wide = predict_match(laliga_source, fixture_id=1001, profile="wide")
    assert len(wide["markets"]["goals"]["lines"]) > len(normal["markets"]["goals"]["lines"])


def test_aggregates_in_context(laliga_source):
    result = predict_match(laliga_source, fixture_id=1001)
    home = result["context"]["aggregates"]["home"]
    away = result["context"]["aggregates"]["away"]
    assert home["goals_for_avg"] == 1.5
    assert away["shots_for_avg"] == 10.0
    assert away["match_count"] == 2


def test_no_upcoming_fixture_is_not_found(laliga_source):
    with pytest.raises(FixtureNotFoundError):
        predict_match(laliga_source, query="Atletico Madrid vs Real Sociedad")


def test_missing_target_rejected():
    src = StubStatsSource()
    with pytest.raises(MalformedInputError):
        predict_match(src)
    assert src.calls == []


@pytest.mark.parametrize(
    "kwargs",
    [
        {"last_n": 0},
        {"last_n": 25},
        {"markets": {"goals": [-1]}},
        {"profile": "exotic"},
    ],
)
def test_invalid_inputs_before_provider(kwargs):
    src = StubStatsSource()
    with pytest.raises(MalformedInputError):
        predict_match(src, fixture_id=1001, **kwargs)
    assert src.calls == []


def test_upstream_failure_propagates(laliga_source):
    laliga_source.fail_fixtures = True
    with pytest.raises(UpstreamError):
        predict_match(laliga_source, fixture_id=1001)


def test_openness_thresholds():
    assert openness_label(None) is None
    assert openness_label(3.0) == "open"
    assert openness_label(2.2) == "balanced"
    assert openness_label(2.19) == "closed"


def test_injury_counts_ignores_other_teams():
    injuries = [
        {"player": {"type": "Missing Fixture"}, "team": {"id": 99}},
        {"player": {"type": "Questionable"}, "team": {"id": 1}},
    ]
    assert injury_counts(injuries, 1, 2) == {
        "home_missing": 0,
        "home_questionable": 1,
        "away_missing": 0,
        "away_questionable": 0,
    }


def test_profile_uppercase_accepted(laliga_source):
    result = predict_match(laliga_source, fixture_id=1001, profile="WIDE")
    assert result["inputs"]["profile"] == "wide"
    assert result["markets"]["red_cards"]["expected_total"] == 0.25
