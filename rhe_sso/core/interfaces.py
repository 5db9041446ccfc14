"""
RHE SSO - Core Interfaces
Configuration du broker et contrats de chargement.
"""

import re
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class InvalidTimeoutError(Exception):
    """Configuration timeout invalide."""

    pass


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


class TimeoutConfig(BaseModel):
    """
    Configuration des timeouts réseau.

    Attributes:
        connect_timeout: Timeout d'établissement de connexion (max 10s)
        request_timeout: Timeout global d'une requête (max 30s)
    """

    model_config = ConfigDict(frozen=True)

    MAX_CONNECT_TIMEOUT: ClassVar[float] = 10.0
    MAX_REQUEST_TIMEOUT: ClassVar[float] = 30.0

    connect_timeout: float = 10.0
    request_timeout: float = 30.0

    @model_validator(mode="after")
    def _check_limits(self) -> "TimeoutConfig":
        if self.connect_timeout <= 0:
            raise InvalidTimeoutError("connect_timeout must be positive")
        if self.connect_timeout > self.MAX_CONNECT_TIMEOUT:
            raise InvalidTimeoutError(
                f"connect_timeout ({self.connect_timeout}s) exceeds "
                f"maximum ({self.MAX_CONNECT_TIMEOUT}s)"
            )
        if self.request_timeout <= 0:
            raise InvalidTimeoutError("request_timeout must be positive")
        if self.request_timeout > self.MAX_REQUEST_TIMEOUT:
            raise InvalidTimeoutError(
                f"request_timeout ({self.request_timeout}s) exceeds "
                f"maximum ({self.MAX_REQUEST_TIMEOUT}s)"
            )
        return self

    def to_httpx(self, request_timeout: Optional[float] = None) -> httpx.Timeout:
        """
        Convertit en httpx.Timeout.

        Args:
            request_timeout: Surcharge ponctuelle du timeout requête

        Returns:
            Timeout httpx (connect borné par la valeur de connexion)

        Raises:
            InvalidTimeoutError: Surcharge nulle, négative ou au-delà du maximum
        """
        total = request_timeout if request_timeout is not None else self.request_timeout
        if total <= 0:
            raise InvalidTimeoutError("request_timeout must be positive")
        if total > self.MAX_REQUEST_TIMEOUT:
            raise InvalidTimeoutError(
                f"request_timeout ({total}s) exceeds maximum ({self.MAX_REQUEST_TIMEOUT}s)"
            )
        return httpx.Timeout(total, connect=min(self.connect_timeout, total))


class BrokerCredentials(BaseModel):
    """
    Identité du broker auprès du serveur SSO.

    Immuable, partagée en lecture seule par le transport et le broker.

    Attributes:
        broker_id: Identifiant unique de l'application broker
        broker_secret: Secret partagé avec le serveur SSO
        base_endpoint: URL de base de l'API REST (ex: https://ENV.sso.rheglobal.com/api)
    """

    model_config = ConfigDict(frozen=True)

    broker_id: str
    broker_secret: str = Field(repr=False)
    base_endpoint: str

    @field_validator("broker_id", "broker_secret", "base_endpoint")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must not be empty")
        return value.strip()

    @field_validator("base_endpoint")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        return value.rstrip("/")


class BrokerConfig(BaseModel):
    """
    Configuration complète d'un broker SSO.

    Attributes:
        credentials: Identité du broker
        auth_endpoint: Endpoint d'authentification SSO (ex: https://ENV.sso.rheglobal.com/auth)
        cookie_lifetime: Secondes avant expiration de la session SSO (défaut: 24h)
        secure_cookie: Cookies envoyés uniquement en HTTPS
        cookie_domain: Domaine des cookies (optionnel)
        cookie_name: Nom du cookie token (dérivé du broker_id si absent)
        service_id: Identifiant de service transmis à l'attachement
        trusted: Broker autorisé à transmettre des identifiants au login
        timeouts: Timeouts réseau
    """

    model_config = ConfigDict(frozen=True)

    ATTACHED_COOKIE: ClassVar[str] = "sso_attached"

    credentials: BrokerCredentials
    auth_endpoint: str
    cookie_lifetime: int = Field(default=86400, gt=0)
    secure_cookie: bool = True
    cookie_domain: Optional[str] = None
    cookie_name: Optional[str] = None
    service_id: Optional[str] = None
    trusted: bool = False
    timeouts: TimeoutConfig = Field(default_factory=TimeoutConfig)

    @field_validator("auth_endpoint")
    @classmethod
    def _check_auth_endpoint(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("auth_endpoint must not be empty")
        return value.strip().rstrip("/")

    @property
    def token_cookie_name(self) -> str:
        """Nom du cookie contenant le token de session."""
        if self.cookie_name:
            return self.cookie_name
        normalised = re.sub(r"[_\W]+", "_", self.credentials.broker_id.lower())
        return f"sso_token_{normalised}"

    @classmethod
    def create(
        cls,
        broker_id: str,
        broker_secret: str,
        api_endpoint: str,
        auth_endpoint: str,
        **options: Any,
    ) -> "BrokerConfig":
        """
        Construit une configuration à partir de paramètres à plat.

        Args:
            broker_id: Identifiant broker
            broker_secret: Secret broker
            api_endpoint: URL de base de l'API REST
            auth_endpoint: URL de l'endpoint d'authentification
            **options: Champs optionnels (cookie_lifetime, secure_cookie, ...)

        Returns:
            BrokerConfig validée
        """
        credentials = BrokerCredentials(
            broker_id=broker_id,
            broker_secret=broker_secret,
            base_endpoint=api_endpoint,
        )
        return cls(credentials=credentials, auth_endpoint=auth_endpoint, **options)


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IConfigLoader(ABC):
    """Charge la configuration d'un broker."""

    @abstractmethod
    def load(self, path: str) -> BrokerConfig:
        """
        Charge une configuration depuis un fichier.

        Raises:
            ConfigIntegrityError: Fichier absent, illisible ou invalide
        """
        pass

    @abstractmethod
    def from_mapping(self, data: Dict[str, Any]) -> BrokerConfig:
        """Construit une configuration depuis un dictionnaire."""
        pass
