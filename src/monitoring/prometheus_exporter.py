from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    generate_latest,
)
from core.config import get_settings
from core.logging import get_logger

logger = get_logger("monitoring.prometheus_exporter")

# Registry dedicato (non il default globale del processo)
_REGISTRY = CollectorRegistry()

PROVIDER_REQUESTS_TOTAL = Counter(
    "matchline_provider_requests_total",
    "Chiamate al provider dati per endpoint ed esito",
    ["endpoint", "outcome"],
    registry=_REGISTRY,
)
STATISTICS_MISSING_TOTAL = Counter(
    "matchline_statistics_missing_total",
    "Fixture aggregate senza statistiche (fetch fallita o payload vuoto)",
    registry=_REGISTRY,
)
PREDICTIONS_TOTAL = Counter(
    "matchline_predictions_total",
    "Previsioni match per esito",
    ["outcome"],
    registry=_REGISTRY,
)


def _enabled() -> bool:
    try:
        return get_settings().enable_prometheus_exporter
    except ValueError:
        logger.debug("Config non disponibile, metriche disattivate")
        return False


def record_provider_request(endpoint: str, outcome: str) -> None:
    if _enabled():
        PROVIDER_REQUESTS_TOTAL.labels(endpoint=endpoint, outcome=outcome).inc()


def record_statistics_missing() -> None:
    if _enabled():
        STATISTICS_MISSING_TOTAL.inc()


def record_prediction(outcome: str) -> None:
    if _enabled():
        PREDICTIONS_TOTAL.labels(outcome=outcome).inc()


def generate_prometheus_text() -> bytes:
    return generate_latest(_REGISTRY)


__all__ = [
    "record_provider_request",
    "record_statistics_missing",
    "record_prediction",
    "generate_prometheus_text",
    "_REGISTRY",
]
