from __future__ import annotations

import threading
import time
from typing import Any, Dict, Optional

import requests

from core.config import Settings, get_settings
from core.logging import get_logger
from monitoring.prometheus_exporter import record_provider_request
from .exceptions import UpstreamError

log = get_logger(__name__)


def _api_errors(data: Dict[str, Any]) -> Optional[str]:
    # API-Sports può rispondere 200 con un oggetto/lista "errors" valorizzato
    errs = data.get("errors")
    if errs and isinstance(errs, (dict, list)) and len(errs) > 0:
        return str(errs)
    message = data.get("message")
    if isinstance(message, str) and message.strip():
        return message.strip()
    return None


class APIFootballHttpClient:
    """
    Client HTTP per API Football (requests.Session), senza retry:
    ogni errore viene sollevato subito come UpstreamError.

    Telemetria minima dell'ultima chiamata (get_stats):
      - calls: chiamate effettuate da questa istanza
      - latency_ms: durata dell'ultima chiamata
      - last_status: ultimo HTTP status ricevuto (None se errore di rete)
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._session = requests.Session()
        self._session.headers.update(
            {
                "x-apisports-key": self._settings.api_football_key,
                "Accept": "application/json",
            }
        )
        self._base = self._settings.api_football_base_url
        self._timeout = self._settings.api_football_timeout

        self._calls = 0
        self._calls_lock = threading.Lock()
        # Snapshot sostituito per intero ad ogni chiamata (le chiamate possono essere concorrenti)
        self._last: Dict[str, Any] = {"latency_ms": 0.0, "last_status": None}

    def _finish(self, path: str, start: float, status: Optional[int], outcome: str) -> float:
        elapsed = (time.perf_counter() - start) * 1000
        with self._calls_lock:
            self._calls += 1
        self._last = {"latency_ms": elapsed, "last_status": status}
        record_provider_request(path, outcome)
        return elapsed

    def api_get(
        self,
        path: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        url = f"{self._base}/{path.lstrip('/')}"
        log.debug("api_football GET %s params=%s", path, params)
        start = time.perf_counter()

        try:
            resp = self._session.get(url, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            elapsed = self._finish(path, start, None, "network_error")
            log.error("Errore rete %s dopo %.1fms: %s", path, elapsed, e)
            raise UpstreamError(None, f"Errore di rete: {e.__class__.__name__}: {e}", path) from e

        status = resp.status_code
        if not 200 <= status < 300:
            elapsed = self._finish(path, start, status, "http_error")
            body = (resp.text or "")[:300]
            log.error("Status %s %s (%.1fms) body=%s", status, path, elapsed, body)
            raise UpstreamError(status, f"Richiesta API fallita (status={status}): {body}", path)

        try:
            data = resp.json()
        except ValueError as e:
            self._finish(path, start, status, "invalid_payload")
            raise UpstreamError(status, f"Risposta non valida (non JSON) status={status}", path) from e

        if not isinstance(data, dict):
            self._finish(path, start, status, "invalid_payload")
            raise UpstreamError(status, "Risposta non valida: atteso oggetto JSON", path)

        api_error = _api_errors(data)
        if api_error:
            self._finish(path, start, status, "api_error")
            log.error("API-Sports errors su %s: %s", path, api_error)
            raise UpstreamError(status, f"API-Sports ha restituito errori: {api_error}", path)

        elapsed = self._finish(path, start, status, "ok")
        log.debug("OK %s %s %.1fms", path, status, elapsed)
        return data

    def get_stats(self) -> Dict[str, Any]:
        last = self._last
        return {
            "calls": self._calls,
            "latency_ms": round(last["latency_ms"], 2),
            "last_status": last["last_status"],
        }


def get_http_client() -> APIFootballHttpClient:
    """
    Restituisce sempre una nuova istanza per far sì che i test che
    modificano le variabili d'ambiente abbiano effetto immediato.
    """
    return APIFootballHttpClient()
