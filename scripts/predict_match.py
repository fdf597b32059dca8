#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from typing import List, Optional

from dotenv import find_dotenv, load_dotenv

from core.config import get_settings
from core.errors import MatchlineError
from core.logging import get_logger
from predictions.pipeline import predict_match
from providers.api_football.exceptions import UpstreamError
from providers.api_football.stats_provider import ApiFootballStatsSource

logger = get_logger("scripts.predict_match")


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Previsione over/under per una partita (API-Football + Poisson)")
    target = p.add_mutually_exclusive_group(required=True)
    target.add_argument("--fixture", type=int, help="ID fixture API-Football")
    target.add_argument("--query", "-q", help="'Squadra A vs Squadra B'")
    p.add_argument("--league", type=int, default=None)
    p.add_argument("--season", type=int, default=None)
    p.add_argument("--next", dest="next_n", type=int, default=None)
    p.add_argument("--last", type=int, default=None)
    p.add_argument("--profile", type=str.lower, choices=["normal", "wide"], default=None)
    p.add_argument("--indent", type=int, default=2)
    return p.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path, override=True)

    args = _parse_args(argv)
    try:
        settings = get_settings()
    except ValueError as e:
        logger.error("Configurazione non valida: %s", e)
        return 2

    # In modalità query lega/stagione di default da env, se presenti
    league = args.league if args.league is not None else (settings.default_league_id if args.query else None)
    season = args.season if args.season is not None else (settings.default_season if args.query else None)

    try:
        result = predict_match(
            ApiFootballStatsSource(),
            fixture_id=args.fixture,
            query=args.query,
            league_id=league,
            season=season,
            next_n=args.next_n,
            last_n=args.last,
            profile=args.profile,
        )
    except MatchlineError as e:
        logger.error("Richiesta non valida: %s", e.message)
        print(json.dumps(e.to_dict(), ensure_ascii=False, indent=args.indent))
        return 1
    except UpstreamError as e:
        logger.error("Errore provider: %s", e.message, extra={"status": e.status})
        return 3

    print(json.dumps(result, ensure_ascii=False, indent=args.indent))
    return 0


if __name__ == "__main__":
    sys.exit(main())
