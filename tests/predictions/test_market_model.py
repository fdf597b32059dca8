import pytest

from core.errors import MalformedInputError
from core.models import TeamAggregate
from predictions.markets import (
    LINE_RANGES,
    PoissonMarketModel,
    default_market_lines,
    expected_total,
    make_lines,
    predict_markets,
    validate_markets,
)


def _agg(**averages):
    return TeamAggregate(match_count=5, averages=averages)


def test_expected_total_symmetric_average():
    home = _agg(goals_for=1.8, goals_against=1.0)
    away = _agg(goals_for=1.2, goals_against=1.5)
    # (1.8 + 1.5)/2 + (1.2 + 1.0)/2 = 1.65 + 1.1
    assert expected_total(home, away, "goals") == pytest.approx(2.75)


def test_expected_total_none_when_any_average_missing():
    home = _agg(corners_for=5.0, corners_against=None)
    away = _agg(corners_for=4.0, corners_against=6.0)
    assert expected_total(home, away, "corners") is None


def test_market_without_data_is_omitted():
    home = _agg(goals_for=1.8, goals_against=1.0)
    away = _agg(goals_for=1.2, goals_against=1.5)
    out = PoissonMarketModel().predict(home, away, {"goals": [2.5], "corners": [9.5]})
    assert list(out) == ["goals"]
    assert out["goals"].expected_total == pytest.approx(2.75)


def test_prediction_is_pure():
    home = _agg(goals_for=1.8, goals_against=1.0, yellow_cards_for=2.0, yellow_cards_against=2.2)
    away = _agg(goals_for=1.2, goals_against=1.5, yellow_cards_for=1.9, yellow_cards_against=2.5)
    markets = {"goals": [1.5, 2.5], "cards": [3.5, 4.5]}
    assert predict_markets(home, away, markets) == predict_markets(home, away, markets)


def test_cards_market_uses_yellow_cards():
    home = _agg(yellow_cards_for=2.0, yellow_cards_against=2.0)
    away = _agg(yellow_cards_for=2.0, yellow_cards_against=2.0)
    out = predict_markets(home, away, {"cards": [3.5]})
    assert out["cards"]["expected_total"] == 4.0
    assert out["cards"]["lines"][0]["line"] == 3.5


def test_make_lines_steps():
    assert make_lines(0.5, 2.5, 0.5) == [0.5, 1.0, 1.5, 2.0, 2.5]
    assert make_lines(8.5, 12.5, 2) == [8.5, 10.5, 12.5]


def test_default_lines_per_profile():
    normal = default_market_lines("normal")
    wide = default_market_lines("wide")
    assert set(normal) == set(LINE_RANGES["normal"])
    assert normal["goals"][0] == 0.5 and normal["goals"][-1] == 8.5
    assert len(wide["corners"]) > len(normal["corners"])
    with pytest.raises(MalformedInputError):
        default_market_lines("exotic")


@pytest.mark.parametrize(
    "markets",
    [
        {},
        {"goals": []},
        {"offsides": [1.5]},
        {"goals": ["abc"]},
        {"goals": [-0.5]},
        {"goals": [float("nan")]},
        {"goals": [float("inf")]},
    ],
)
def test_validate_markets_rejects(markets):
    with pytest.raises(MalformedInputError):
        validate_markets(markets)


def test_validate_markets_coerces_numeric_strings():
    assert validate_markets({"goals": ["2.5", 3]}) == {"goals": (2.5, 3.0)}


def test_profile_name_is_case_insensitive():
    assert default_market_lines("  WIDE ") == default_market_lines("wide")
    assert default_market_lines("Normal") == default_market_lines("normal")


def test_red_cards_lines_in_every_profile():
    assert default_market_lines("normal")["red_cards"] == [0.5, 1.5, 2.5]
    assert default_market_lines("wide")["red_cards"] == [0.5, 1.5, 2.5, 3.5]
