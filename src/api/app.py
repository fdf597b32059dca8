from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from core.config import get_settings
from core.errors import FixtureNotFoundError, MatchlineError, TeamNotFoundError
from core.logging import get_logger
from providers.api_football.exceptions import UpstreamError

from api.routes.health import router as health_router
from api.routes.teams import router as teams_router
from api.routes.fixtures import router as fixtures_router
from api.routes.predict import router as predict_router
from api.routes.metrics import router as metrics_router

logger = get_logger("api.app")

_NOT_FOUND = (TeamNotFoundError, FixtureNotFoundError)


async def _matchline_error_handler(request: Request, exc: MatchlineError) -> JSONResponse:
    status = 404 if isinstance(exc, _NOT_FOUND) else 400
    logger.info("Richiesta rifiutata: %s", exc.message, extra={"path": request.url.path, "status": status})
    return JSONResponse(status_code=status, content=exc.to_dict())


async def _upstream_error_handler(request: Request, exc: UpstreamError) -> JSONResponse:
    logger.error(
        "Errore provider: %s",
        exc.message,
        extra={"path": request.url.path, "status": exc.status},
    )
    return JSONResponse(
        status_code=502,
        content={"error": "upstream_error", "message": exc.message, "details": exc.to_dict()},
    )


def create_app() -> FastAPI:
    app = FastAPI(title="Matchline Prediction API", version="0.1.0")
    try:
        get_settings()
    except ValueError as exc:  # pragma: no cover
        logger.error("Impossibile caricare settings: %s", exc)

    app.add_exception_handler(MatchlineError, _matchline_error_handler)
    app.add_exception_handler(UpstreamError, _upstream_error_handler)

    app.include_router(health_router)
    app.include_router(teams_router)
    app.include_router(fixtures_router)
    app.include_router(predict_router)
    app.include_router(metrics_router)
    return app


app = create_app()
