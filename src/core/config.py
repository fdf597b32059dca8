import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

# Ordine di precedenza: il primo valorizzato vince
_API_KEY_VARS = (
    "API_FOOTBALL_KEY",
    "APIFOOTBALL_KEY",
    "APISPORTS_KEY",
    "API_SPORTS_KEY",
    "API_FOOTBALL_API_KEY",
)

LAST_MIN, LAST_MAX = 1, 20
NEXT_MIN, NEXT_MAX = 5, 80
LINE_PROFILES = {"normal", "wide"}


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    v = value.strip().lower()
    if v in {"0", "false", "no"}:
        return False
    return True


def _clamp_int(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


@dataclass
class Settings:
    api_football_key: str
    api_football_base_url: str
    api_football_timeout: float
    default_league_id: Optional[int]
    default_season: Optional[int]
    log_level: str

    context_default_last: int
    context_max_workers: int

    resolver_default_next: int

    market_line_profile: str

    enable_prometheus_exporter: bool

    @classmethod
    def from_env(cls) -> "Settings":
        key = None
        for name in _API_KEY_VARS:
            raw_key = (os.getenv(name) or "").strip()
            if raw_key:
                key = raw_key
                break
        if not key:
            raise ValueError(
                "API_FOOTBALL_KEY non impostata. Aggiungi a .env: API_FOOTBALL_KEY=LA_TUA_CHIAVE "
                "(alias accettati: " + ", ".join(_API_KEY_VARS[1:]) + ")"
            )

        def _opt_int(name: str) -> Optional[int]:
            raw = os.getenv(name)
            if not raw:
                return None
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un intero (valore: {raw!r})") from e

        def _int(name: str, default: int) -> int:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return int(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un intero (valore: {raw!r})") from e

        def _float(name: str, default: float) -> float:
            raw = os.getenv(name)
            if not raw:
                return default
            try:
                return float(raw)
            except ValueError as e:
                raise ValueError(f"Variabile {name} deve essere un numero (valore: {raw!r})") from e

        base_url = os.getenv("API_FOOTBALL_BASE_URL", "https://v3.football.api-sports.io").rstrip("/")
        timeout = _float("API_FOOTBALL_TIMEOUT", 10.0)
        league_id = _opt_int("API_FOOTBALL_DEFAULT_LEAGUE_ID")
        season = _opt_int("API_FOOTBALL_DEFAULT_SEASON")
        log_level = os.getenv("MATCHLINE_LOG_LEVEL", "INFO").upper()

        context_default_last = _clamp_int(_int("CONTEXT_DEFAULT_LAST", 10), LAST_MIN, LAST_MAX)
        context_max_workers = _int("CONTEXT_MAX_WORKERS", 8)
        if context_max_workers < 1:
            context_max_workers = 1

        resolver_default_next = _clamp_int(_int("RESOLVER_DEFAULT_NEXT", 30), NEXT_MIN, NEXT_MAX)

        market_line_profile = os.getenv("MARKET_LINE_PROFILE", "normal").strip().lower()
        if market_line_profile not in LINE_PROFILES:
            market_line_profile = "normal"

        enable_prometheus_exporter = _parse_bool(os.getenv("ENABLE_PROMETHEUS_EXPORTER"), True)

        return cls(
            api_football_key=key,
            api_football_base_url=base_url,
            api_football_timeout=timeout,
            default_league_id=league_id,
            default_season=season,
            log_level=log_level,
            context_default_last=context_default_last,
            context_max_workers=context_max_workers,
            resolver_default_next=resolver_default_next,
            market_line_profile=market_line_profile,
            enable_prometheus_exporter=enable_prometheus_exporter,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


def _reset_settings_cache_for_tests() -> None:
    get_settings.cache_clear()


__all__ = [
    "Settings",
    "get_settings",
    "_reset_settings_cache_for_tests",
    "LAST_MIN",
    "LAST_MAX",
    "NEXT_MIN",
    "NEXT_MAX",
]
