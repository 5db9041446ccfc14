"""
RHE SSO: Broker - Interfaces

Contrats du broker de session SSO et de la persistance des cookies.

Cycle de vie:
    UNATTACHED -> ATTACHING (token généré et persisté, liaison en cours)
               -> ATTACHED  (liaison confirmée, requêtes authentifiées permises)
               -> UNATTACHED (détachement explicite, expiration, ou HTTP 403)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from ..core.errors import Result


class BrokerState(Enum):
    """États du broker de session."""

    UNATTACHED = "unattached"
    ATTACHING = "attaching"
    ATTACHED = "attached"


@dataclass(frozen=True)
class RequestContext:
    """
    Contexte de la requête entrante transmis au login.

    Attributes:
        user_agent: User-Agent du navigateur
        username: Identifiant posté (brokers de confiance uniquement)
        password: Mot de passe posté (brokers de confiance uniquement)
    """

    user_agent: str = ""
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)


@dataclass(frozen=True)
class CookieSpec:
    """
    Ecriture d'un cookie.

    Attributes:
        name: Nom du cookie
        value: Valeur ("" pour un cookie effacé)
        expires: Date d'expiration (UTC)
        http_only: Invisible du JavaScript client
        secure: Envoyé uniquement en HTTPS
        domain: Domaine du cookie (optionnel)
        path: Chemin du cookie
    """

    name: str
    value: str
    expires: datetime
    http_only: bool = True
    secure: bool = True
    domain: Optional[str] = None
    path: str = "/"

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return self.expires <= (now or datetime.now(timezone.utc))


class ICookieStore(ABC):
    """
    Interface de stockage des cookies du navigateur.

    Invariant:
        Le token et le drapeau sso_attached sont écrits ensemble
        (valeur et expiration) via un unique appel à set_many.
    """

    @abstractmethod
    def get(self, name: str) -> Optional[str]:
        """Retourne la valeur d'un cookie reçu, None si absent."""
        pass

    @abstractmethod
    def set_many(self, cookies: List[CookieSpec]) -> None:
        """Ecrit un groupe de cookies en une seule opération."""
        pass


class ISessionBroker(ABC):
    """Interface du broker de session SSO."""

    @property
    @abstractmethod
    def state(self) -> BrokerState:
        """Etat courant du broker."""
        pass

    @abstractmethod
    def is_attached(self) -> bool:
        """True si la session est liée au serveur SSO."""
        pass

    @abstractmethod
    async def attach(self, return_url: Optional[str] = None, timeout: Optional[float] = None) -> None:
        """
        Génère et persiste un token, puis le lie à une session SSO.

        Idempotent: aucune I/O si un token existe déjà.

        Raises:
            AuthTransportError: Echec réseau ou réponse non JSON
            AuthError: Liaison refusée par le serveur
        """
        pass

    @abstractmethod
    def get_attach_url(self, return_url: Optional[str] = None) -> str:
        """Retourne l'URL de liaison pour un attachement par redirection navigateur."""
        pass

    @abstractmethod
    async def login(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        context: Optional[RequestContext] = None,
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Authentifie l'utilisateur sur la session attachée."""
        pass

    @abstractmethod
    async def logout(self, timeout: Optional[float] = None) -> None:
        """Termine la session utilisateur sur le serveur SSO."""
        pass

    @abstractmethod
    async def get_user_info(self, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Retourne les informations utilisateur (cache mémoire)."""
        pass

    @abstractmethod
    async def try_request(
        self,
        method: str,
        command: str,
        data: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Result:
        """Exécute une requête authentifiée et retourne un Result classifié."""
        pass

    @abstractmethod
    async def request(
        self,
        method: str,
        command: str,
        data: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Any:
        """
        Exécute une requête authentifiée.

        Raises:
            NotAttachedError: Aucun token, ou session perdue (HTTP 403)
            AuthError: Requête rejetée (HTTP >= 400)
            AuthTransportError: Echec réseau ou réponse non JSON
        """
        pass

    @abstractmethod
    def clear_token(self) -> None:
        """Expire les deux cookies et oublie le token."""
        pass

    @abstractmethod
    def detach(self) -> None:
        """Retourne à l'état UNATTACHED."""
        pass
