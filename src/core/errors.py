from __future__ import annotations

from typing import Any, Dict, Optional


class MatchlineError(Exception):
    """Base per gli errori di dominio del motore di previsione."""

    kind = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "message": self.message, "details": self.details}


class MalformedInputError(MatchlineError):
    """Input rifiutato prima di qualsiasi chiamata al provider."""

    kind = "malformed_input"


class TeamNotFoundError(MatchlineError):
    """Ricerca squadra per nome senza risultati; `side` indica quale lato (home/away)."""

    kind = "team_not_found"

    def __init__(self, side: str, name: str) -> None:
        super().__init__(
            f"Squadra non trovata ({side}): {name!r}",
            details={"side": side, "name": name},
        )
        self.side = side
        self.name = name


class FixtureNotFoundError(MatchlineError):
    kind = "fixture_not_found"


__all__ = [
    "MatchlineError",
    "MalformedInputError",
    "TeamNotFoundError",
    "FixtureNotFoundError",
]
