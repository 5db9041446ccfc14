"""
RHE SSO: Broker - Session Broker

Attache la session navigateur de l'utilisateur à une session du serveur SSO.

Protocole:
    1. Génération d'un token aléatoire (secrets) s'il n'en existe pas
    2. Persistance du token et du drapeau sso_attached="0" (cookies)
    3. Liaison: GET {auth}/attach?broker=..&token=..&checksum=sha256("attach"+token+secret)
    4. Drapeau sso_attached="1" une fois la liaison confirmée
    5. Requêtes authentifiées: Authorization: Bearer {token}

Invariants:
    - Le token est persisté AVANT l'appel de liaison
    - Aucune I/O réseau sans token: NotAttachedError immédiat
    - HTTP 403 sur une requête: token effacé, retour à UNATTACHED
    - Un timeout est un échec de transport: aucune transition d'état
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlencode

import httpx

from ..api.transport import flatten_form
from ..core.errors import AuthError, AuthTransportError, NotAttachedError, Result
from ..core.interfaces import BrokerConfig
from ..logging import StructuredLogger
from .cookies import MemoryCookieStore
from .interfaces import BrokerState, CookieSpec, ICookieStore, ISessionBroker, RequestContext

EXPIRED = datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)


class SessionBroker(ISessionBroker):
    """
    Broker de session SSO.

    Une instance par requête entrante: l'état (token, cache utilisateur) n'est
    pas protégé contre un usage concurrent.

    Example:
        store = MemoryCookieStore(request.cookies)
        broker = SessionBroker(config, cookie_store=store)
        await broker.attach()
        user = await broker.login(context=RequestContext(user_agent=ua))
    """

    TOKEN_BYTES: int = 20

    def __init__(
        self,
        config: BrokerConfig,
        cookie_store: Optional[ICookieStore] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Initialise le broker et relit le token depuis les cookies.

        Args:
            config: Configuration du broker
            cookie_store: Cookies de la requête entrante (MemoryCookieStore vide par défaut)
            http_client: Client httpx injecté (sinon créé à la demande et possédé)
            logger: Logger structuré
        """
        self._config = config
        self._cookies = cookie_store or MemoryCookieStore()
        self._client = http_client
        self._owns_client = http_client is None
        self._logger = logger or StructuredLogger("rhe_sso.broker")
        self._logger.bind_broker(config.credentials.broker_id)
        self._user_info: Optional[Dict[str, Any]] = None

        self._token: Optional[str] = self._cookies.get(config.token_cookie_name)
        if not self._token:
            self._token = None
            self._state = BrokerState.UNATTACHED
        elif self._cookies.get(config.ATTACHED_COOKIE) == "1":
            self._state = BrokerState.ATTACHED
        else:
            self._state = BrokerState.ATTACHING

    @property
    def config(self) -> BrokerConfig:
        return self._config

    @property
    def state(self) -> BrokerState:
        return self._state

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user_info(self) -> Optional[Dict[str, Any]]:
        """Informations utilisateur en cache, sans appel réseau."""
        return self._user_info

    def is_attached(self) -> bool:
        return self._state is BrokerState.ATTACHED

    # ──────────────────────────────────────────────────────────────────────
    # Token et cookies
    # ──────────────────────────────────────────────────────────────────────

    def generate_token(self) -> str:
        """
        Génère et persiste un token s'il n'en existe pas.

        Returns:
            Token courant
        """
        if self._token:
            return self._token

        self._token = secrets.token_hex(self.TOKEN_BYTES)
        self._state = BrokerState.ATTACHING
        self._write_cookies(attached=False)
        self._logger.debug("Session token generated", state=self._state.value)
        return self._token

    def clear_token(self) -> None:
        """Expire immédiatement les deux cookies et oublie le token."""
        self._cookies.set_many(self._cookie_pair("", "0", EXPIRED))
        self._token = None
        self._user_info = None
        self._state = BrokerState.UNATTACHED

    def detach(self) -> None:
        self.clear_token()
        self._logger.info("Session detached")

    def _write_cookies(self, attached: bool) -> None:
        expires = datetime.now(timezone.utc) + timedelta(seconds=self._config.cookie_lifetime)
        self._cookies.set_many(self._cookie_pair(self._token or "", "1" if attached else "0", expires))

    def _cookie_pair(self, token: str, flag: str, expires: datetime) -> List[CookieSpec]:
        common = {
            "expires": expires,
            "secure": self._config.secure_cookie,
            "domain": self._config.cookie_domain,
        }
        return [
            CookieSpec(name=self._config.token_cookie_name, value=token, http_only=True, **common),
            CookieSpec(name=self._config.ATTACHED_COOKIE, value=flag, http_only=False, **common),
        ]

    # ──────────────────────────────────────────────────────────────────────
    # Attachement
    # ──────────────────────────────────────────────────────────────────────

    def _checksum(self, command: str) -> str:
        raw = f"{command}{self._token}{self._config.credentials.broker_secret}"
        return hashlib.sha256(raw.encode("utf-8")).hexdigest()

    def _attach_params(self, return_url: Optional[str]) -> Dict[str, str]:
        params = {
            "broker": self._config.credentials.broker_id,
            "token": self._token or "",
            "checksum": self._checksum("attach"),
        }
        if self._config.service_id:
            params["service_id"] = self._config.service_id
        if return_url:
            params["return_url"] = return_url
        return params

    def get_attach_url(self, return_url: Optional[str] = None) -> str:
        """
        Retourne l'URL de liaison signée, pour un attachement par redirection.

        Le token est généré et persisté si nécessaire; aucune I/O réseau.
        """
        self.generate_token()
        return f"{self._config.auth_endpoint}/attach?{urlencode(self._attach_params(return_url))}"

    async def attach(self, return_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        """
        Lie un nouveau token à une session du serveur SSO.

        Sans effet si un token existe déjà: une session établie n'est jamais
        écrasée par une nouvelle liaison. En cas d'échec de la liaison, le
        token reste persisté et le broker reste ATTACHING.

        Args:
            return_url: URL de retour transmise au serveur
            timeout: Surcharge du timeout requête (secondes)

        Raises:
            AuthTransportError: Echec réseau, timeout ou réponse non JSON
            AuthError: Liaison refusée
            NotAttachedError: Liaison refusée en 403 (token effacé)
        """
        if self._token:
            return

        self.generate_token()
        result = await self._send("GET", "attach", self._attach_params(return_url), False, timeout)
        if not result.ok:
            self._logger.warn("Session attach failed", kind=result.kind.value, state=self._state.value)
            raise result.error

        self._state = BrokerState.ATTACHED
        self._write_cookies(attached=True)
        self._logger.info("Session attached")

    # ──────────────────────────────────────────────────────────────────────
    # Requêtes authentifiées
    # ──────────────────────────────────────────────────────────────────────

    async def try_request(
        self,
        method: str,
        command: str,
        data: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Result:
        """
        Exécute une requête authentifiée par le token.

        Returns:
            Result avec le corps JSON décodé, ou NotAttachedError / AuthError /
            AuthTransportError
        """
        if not self._token:
            return Result.failure(NotAttachedError("No token"))

        result = await self._send(method, command, data, True, timeout)

        if result.ok and self._state is BrokerState.ATTACHING:
            self._state = BrokerState.ATTACHED
            self._write_cookies(attached=True)

        return result

    async def request(
        self,
        method: str,
        command: str,
        data: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        return (await self.try_request(method, command, data, timeout)).unwrap()

    async def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        context: Optional[RequestContext] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Authentifie l'utilisateur sur la session attachée.

        Seuls les brokers de confiance transmettent des identifiants; les
        autres s'appuient sur la session SSO déjà ouverte côté serveur.

        Args:
            username: Identifiant (prioritaire sur le contexte)
            password: Mot de passe (prioritaire sur le contexte)
            context: Contexte de la requête entrante
            timeout: Surcharge du timeout requête (secondes)

        Returns:
            Informations utilisateur, mises en cache

        Raises:
            NotAttachedError: Aucun token ou session perdue
            AuthError: Identifiants refusés
        """
        context = context or RequestContext()
        username = username if username is not None else context.username
        password = password if password is not None else context.password

        if not self._config.trusted and (username is not None or password is not None):
            self._logger.warn("Credentials ignored for untrusted broker")
            username = password = None

        data = {"username": username, "password": password, "userAgent": context.user_agent}
        self._user_info = await self.request("POST", "login", data, timeout)
        return self._user_info

    async def logout(self, timeout: Optional[float] = None) -> None:
        await self.request("POST", "logout", timeout=timeout)
        self._user_info = None

    async def get_user_info(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Retourne les informations utilisateur, récupérées une seule fois."""
        if self._user_info is None:
            self._user_info = await self.request("GET", "userInfo", timeout=timeout)
        return self._user_info

    # ──────────────────────────────────────────────────────────────────────
    # Transport
    # ──────────────────────────────────────────────────────────────────────

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._config.timeouts.to_httpx())
        return self._client

    async def _send(
        self,
        method: str,
        command: str,
        data: Optional[Mapping[str, Any]],
        bearer: bool,
        timeout: Optional[float],
    ) -> Result:
        method = method.upper()
        url = f"{self._config.auth_endpoint}/{command}"
        headers = {"Accept": "application/json"}
        if bearer:
            headers["Authorization"] = f"Bearer {self._token}"

        fields = dict(flatten_form(data or {}))
        body = fields if method == "POST" else None
        query = fields if method != "POST" else None

        self._logger.debug("SSO request", method=method, command=command)

        try:
            response = await self._get_client().request(
                method,
                url,
                params=query or None,
                data=body or None,
                headers=headers,
                timeout=self._config.timeouts.to_httpx(timeout),
            )
        except httpx.HTTPError as e:
            self._logger.error("SSO request failed", command=command, error=type(e).__name__)
            error = AuthTransportError(f"Server request failed: {e}", cause=e)
            error.__cause__ = e
            return Result.failure(error)

        try:
            body_json = response.json()
        except ValueError:
            content_type = response.headers.get("Content-Type", "")
            self._logger.error("SSO response is not JSON", command=command, content_type=content_type)
            return Result.failure(
                AuthTransportError(f"Expected application/json response, got {content_type or 'nothing'}")
            )

        status = response.status_code
        if status == 403:
            self.clear_token()
            self._logger.warn("SSO session lost", command=command, status_code=status)
            return Result.failure(NotAttachedError(self._error_message(body_json, response), status))

        if status >= 400:
            data_payload = body_json.get("data") if isinstance(body_json, dict) else None
            self._logger.info("SSO request rejected", command=command, status_code=status)
            return Result.failure(AuthError(self._error_message(body_json, response), data_payload, status))

        return Result.success(body_json)

    @staticmethod
    def _error_message(body: Any, response: httpx.Response) -> str:
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return response.text

    async def aclose(self) -> None:
        """Ferme le client HTTP s'il a été créé par le broker."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "SessionBroker":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
