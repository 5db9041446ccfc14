"""
RHE SSO - Pytest Configuration
Fixtures partagées pour tous les tests.
"""

from typing import Any, Dict, List
from urllib.parse import parse_qs

import httpx
import pytest

from rhe_sso.core import BrokerConfig, BrokerCredentials
from rhe_sso.logging import LogConfig, LogLevel, StructuredLogger

API_ENDPOINT = "https://sso.test/api"
AUTH_ENDPOINT = "https://sso.test/auth"


class RecordingServer:
    """
    Faux serveur SSO branché sur httpx.MockTransport.

    Enregistre chaque requête reçue et répond via des routes
    (méthode, chemin) -> réponse ou callable(request) -> réponse.
    """

    def __init__(self) -> None:
        self.requests: List[httpx.Request] = []
        self._routes: Dict[tuple, Any] = {}
        self.transport = httpx.MockTransport(self._handle)

    def route(self, method: str, path: str, response: Any) -> None:
        self._routes[(method.upper(), path)] = response

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self.transport)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self._routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": "not_found"})
        if callable(handler):
            return handler(request)
        return handler

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]

    @staticmethod
    def form(request: httpx.Request) -> Dict[str, str]:
        """Décode un corps application/x-www-form-urlencoded."""
        parsed = parse_qs(request.content.decode(), keep_blank_values=True)
        return {key: values[0] for key, values in parsed.items()}

    @staticmethod
    def query(request: httpx.Request) -> Dict[str, str]:
        return dict(request.url.params.items())


@pytest.fixture
def server() -> RecordingServer:
    return RecordingServer()


@pytest.fixture
def credentials() -> BrokerCredentials:
    return BrokerCredentials(
        broker_id="Test-Broker",
        broker_secret="s3cret",
        base_endpoint=API_ENDPOINT,
    )


@pytest.fixture
def broker_config(credentials: BrokerCredentials) -> BrokerConfig:
    return BrokerConfig(credentials=credentials, auth_endpoint=AUTH_ENDPOINT, cookie_lifetime=3600)


@pytest.fixture
def log_lines() -> List[str]:
    return []


@pytest.fixture
def logger(log_lines: List[str]) -> StructuredLogger:
    """Logger capturant toutes les lignes JSON, niveau DEBUG."""
    return StructuredLogger(
        "rhe_sso.tests",
        config=LogConfig(min_level=LogLevel.DEBUG),
        output_handler=log_lines.append,
    )

