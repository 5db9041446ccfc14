"""
RHE SSO: API - HTTP Transport

Appels HTTP signés vers l'API REST du serveur SSO.

Comportement:
    - En-têtes X-Broker-Id / X-Broker-Secret sur chaque requête
    - PUT envoyé en POST avec le marqueur _method=put
    - Succès: retourne la valeur du champ "payload"
    - HTTP 422: ValidationError portant la map champ -> messages
    - Autre statut >= 400: ApiError (statut + corps brut)
    - Corps non JSON ou sans "payload": MalformedResponseError
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Tuple

import httpx

from ..core.errors import ApiError, MalformedResponseError, Result, ValidationError
from ..core.interfaces import BrokerCredentials, TimeoutConfig
from ..logging import StructuredLogger
from .interfaces import IHttpTransport

METHOD_OVERRIDE_FIELD = "_method"


def flatten_form(data: Mapping[str, Any], prefix: str = "") -> List[Tuple[str, str]]:
    """
    Aplatit un dictionnaire imbriqué en paires de formulaire.

    Les clés imbriquées suivent la notation crochets (options[locale]=fr),
    les booléens deviennent "1"/"0" et les valeurs None sont omises.

    Args:
        data: Paramètres à encoder
        prefix: Clé parente

    Returns:
        Liste de paires (clé, valeur)
    """
    pairs: List[Tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else str(key)
        if value is None:
            continue
        if isinstance(value, Mapping):
            pairs.extend(flatten_form(value, name))
        elif isinstance(value, (list, tuple)):
            pairs.extend(flatten_form(dict(enumerate(value)), name))
        elif isinstance(value, bool):
            pairs.append((name, "1" if value else "0"))
        else:
            pairs.append((name, str(value)))
    return pairs


class HttpTransport(IHttpTransport):
    """
    Transport HTTP vers l'API REST du SSO.

    Example:
        transport = HttpTransport(credentials)
        user = await transport.get("/user-by-email/a@b.com")
    """

    def __init__(
        self,
        credentials: BrokerCredentials,
        http_client: Optional[httpx.AsyncClient] = None,
        timeouts: Optional[TimeoutConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Args:
            credentials: Identité du broker et endpoint de base
            http_client: Client httpx injecté (sinon créé à la demande et possédé)
            timeouts: Timeouts réseau
            logger: Logger structuré
        """
        self._credentials = credentials
        self._timeouts = timeouts or TimeoutConfig()
        self._client = http_client
        self._owns_client = http_client is None
        self._logger = logger or StructuredLogger("rhe_sso.api")
        self._logger.bind_broker(credentials.broker_id)

    @property
    def credentials(self) -> BrokerCredentials:
        return self._credentials

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeouts.to_httpx())
        return self._client

    def _headers(self) -> Dict[str, str]:
        return {
            "X-Broker-Id": self._credentials.broker_id,
            "X-Broker-Secret": self._credentials.broker_secret,
            "Accept": "application/json",
        }

    async def send(
        self,
        method: str,
        path: str,
        form: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Result:
        """
        Exécute la requête et classifie la réponse.

        Returns:
            Result avec le payload ou ValidationError / ApiError / MalformedResponseError
        """
        method = method.upper()
        url = self._credentials.base_endpoint + path
        params: Dict[str, Any] = dict(form or {})

        if method == "PUT":
            method = "POST"
            params[METHOD_OVERRIDE_FIELD] = "put"

        body = dict(flatten_form(params)) if method != "GET" else None

        self._logger.debug("API request", method=method, path=path)

        try:
            response = await self._get_client().request(
                method,
                url,
                data=body or None,
                headers=self._headers(),
                timeout=self._timeouts.to_httpx(timeout),
            )
        except httpx.HTTPError as e:
            self._logger.error("API request failed", method=method, path=path, error=str(e))
            error = ApiError(None, "", f"API request to {path} failed: {e}")
            error.__cause__ = e
            return Result.failure(error)

        return self._classify(response, path)

    def _classify(self, response: httpx.Response, path: str) -> Result:
        status = response.status_code
        text = response.text

        if status >= 400:
            api_error = ApiError(status, text)
            if status != 422:
                self._logger.warn("API call rejected", path=path, status_code=status)
                return Result.failure(api_error)

            try:
                fields = self._decode_payload(status, text)
            except MalformedResponseError as e:
                e.__cause__ = api_error
                return Result.failure(e)

            error = ValidationError(self._normalise_fields(fields))
            error.__cause__ = api_error
            self._logger.info("API validation failed", path=path, fields=sorted(error.fields))
            return Result.failure(error)

        try:
            return Result.success(self._decode_payload(status, text))
        except MalformedResponseError as e:
            self._logger.error("Malformed API response", path=path, status_code=status, reason=e.reason)
            return Result.failure(e)

    @staticmethod
    def _decode_payload(status: int, text: str) -> Any:
        try:
            document = json.loads(text)
        except ValueError:
            raise MalformedResponseError(status, text, "expected JSON")

        if not isinstance(document, dict) or "payload" not in document:
            raise MalformedResponseError(status, text, "missing payload")

        return document["payload"]

    @staticmethod
    def _normalise_fields(fields: Any) -> Dict[str, List[str]]:
        if not isinstance(fields, dict):
            return {}
        result: Dict[str, List[str]] = {}
        for name, messages in fields.items():
            if isinstance(messages, (list, tuple)):
                result[str(name)] = [str(m) for m in messages]
            else:
                result[str(name)] = [str(messages)]
        return result

    async def get(self, path: str, timeout: Optional[float] = None) -> Any:
        return (await self.send("GET", path, timeout=timeout)).unwrap()

    async def post(
        self, path: str, form: Optional[Mapping[str, Any]] = None, timeout: Optional[float] = None
    ) -> Any:
        return (await self.send("POST", path, form, timeout)).unwrap()

    async def put(
        self, path: str, form: Optional[Mapping[str, Any]] = None, timeout: Optional[float] = None
    ) -> Any:
        return (await self.send("PUT", path, form, timeout)).unwrap()

    async def delete(self, path: str, timeout: Optional[float] = None) -> Any:
        return (await self.send("DELETE", path, timeout=timeout)).unwrap()

    async def aclose(self) -> None:
        """Ferme le client HTTP s'il a été créé par le transport."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "HttpTransport":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
