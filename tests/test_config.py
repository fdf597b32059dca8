import pytest

from core.config import get_settings, _reset_settings_cache_for_tests

_KEY_VARS = ("API_FOOTBALL_KEY", "APIFOOTBALL_KEY", "APISPORTS_KEY", "API_SPORTS_KEY", "API_FOOTBALL_API_KEY")


def test_missing_api_key_raises(monkeypatch) -> None:
    for name in _KEY_VARS:
        monkeypatch.delenv(name, raising=False)
    _reset_settings_cache_for_tests()
    with pytest.raises(ValueError) as exc:
        get_settings()
    assert "API_FOOTBALL_KEY" in str(exc.value)


def test_present_api_key_ok(monkeypatch) -> None:
    monkeypatch.setenv("API_FOOTBALL_KEY", "TEST_KEY")
    _reset_settings_cache_for_tests()
    s = get_settings()
    assert s.api_football_key == "TEST_KEY"


def test_key_alias_accepted(monkeypatch) -> None:
    for name in _KEY_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("APISPORTS_KEY", "  ALIAS_KEY ")
    _reset_settings_cache_for_tests()
    assert get_settings().api_football_key == "ALIAS_KEY"


def test_defaults(monkeypatch) -> None:
    for name in ("CONTEXT_DEFAULT_LAST", "RESOLVER_DEFAULT_NEXT", "MARKET_LINE_PROFILE", "API_FOOTBALL_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    _reset_settings_cache_for_tests()
    s = get_settings()
    assert s.context_default_last == 10
    assert s.resolver_default_next == 30
    assert s.market_line_profile == "normal"
    assert s.api_football_base_url == "https://v3.football.api-sports.io"


def test_env_defaults_are_clamped(monkeypatch) -> None:
    monkeypatch.setenv("CONTEXT_DEFAULT_LAST", "50")
    monkeypatch.setenv("RESOLVER_DEFAULT_NEXT", "1")
    monkeypatch.setenv("MARKET_LINE_PROFILE", "aggressive")
    _reset_settings_cache_for_tests()
    s = get_settings()
    assert s.context_default_last == 20
    assert s.resolver_default_next == 5
    assert s.market_line_profile == "normal"


def test_invalid_int_env(monkeypatch) -> None:
    monkeypatch.setenv("CONTEXT_MAX_WORKERS", "many")
    _reset_settings_cache_for_tests()
    with pytest.raises(ValueError) as exc:
        get_settings()
    assert "CONTEXT_MAX_WORKERS" in str(exc.value)
