"""
RHE SSO: API - Interfaces

Contrats du transport HTTP signé et du client de gestion des utilisateurs.

Enveloppe de réponse:
    Succès  -> {"payload": <data>}
    HTTP 422 -> {"payload": {champ: [messages...]}}
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from ..core.errors import Result


class LicenceType(Enum):
    """Licences pouvant être signées par un utilisateur."""

    TERMS_OF_SERVICE = "terms_of_service"
    CLIENT_LICENCE = "client_licence"
    EULA = "eula"
    CONTRIBUTIONS = "contributions"
    REASONABLE_USE = "reasonable_use"


class IHttpTransport(ABC):
    """
    Interface transport HTTP vers l'API REST du SSO.

    Chaque requête porte les en-têtes X-Broker-Id et X-Broker-Secret.
    Aucun retry, aucun cache.
    """

    @abstractmethod
    async def send(
        self,
        method: str,
        path: str,
        form: Optional[Mapping[str, Any]] = None,
        timeout: Optional[float] = None,
    ) -> Result:
        """
        Exécute une requête et classifie la réponse.

        Args:
            method: Verbe HTTP (GET, POST, PUT, DELETE)
            path: Chemin relatif à l'endpoint de base
            form: Paramètres de formulaire (corps urlencoded)
            timeout: Surcharge du timeout requête (secondes)

        Returns:
            Result portant le payload désenveloppé ou l'erreur typée
        """
        pass

    @abstractmethod
    async def get(self, path: str, timeout: Optional[float] = None) -> Any:
        """GET, retourne le payload. Lève l'erreur typée en cas d'échec."""
        pass

    @abstractmethod
    async def post(
        self, path: str, form: Optional[Mapping[str, Any]] = None, timeout: Optional[float] = None
    ) -> Any:
        """POST formulaire, retourne le payload."""
        pass

    @abstractmethod
    async def put(
        self, path: str, form: Optional[Mapping[str, Any]] = None, timeout: Optional[float] = None
    ) -> Any:
        """PUT (POST + _method=put), retourne le payload."""
        pass

    @abstractmethod
    async def delete(self, path: str, timeout: Optional[float] = None) -> Any:
        """DELETE, retourne le payload."""
        pass


class IUserApiClient(ABC):
    """
    Interface client de gestion des utilisateurs SSO.

    Toutes les opérations délèguent au transport; les erreurs remontent
    inchangées (ValidationError, ApiError).
    """

    @abstractmethod
    async def is_email_registered(self, email: str) -> bool:
        """Vérifie si un utilisateur existe pour cet email."""
        pass

    @abstractmethod
    async def register(
        self, user_details: Mapping[str, Any], options: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """Crée un compte utilisateur sur le serveur SSO."""
        pass

    @abstractmethod
    async def get_user_by_email(self, email: str) -> Dict[str, Any]:
        """Récupère un utilisateur par email."""
        pass

    @abstractmethod
    async def get_user_by_credentials(self, email: str, password: str) -> Dict[str, Any]:
        """Récupère un utilisateur par email et mot de passe."""
        pass

    @abstractmethod
    async def seed_sso_user(self, user_details: Mapping[str, Any]) -> Dict[str, Any]:
        """Importe un utilisateur existant dans la base SSO."""
        pass

    @abstractmethod
    async def update_user(self, user_id: Union[int, str], user_details: Mapping[str, Any]) -> Dict[str, Any]:
        """Met à jour un utilisateur."""
        pass

    @abstractmethod
    async def attach_user(self, user_id: Union[int, str]) -> Any:
        """Rattache un utilisateur au service du broker."""
        pass

    @abstractmethod
    async def detach_user(self, user_id: Union[int, str]) -> Any:
        """Détache un utilisateur du service du broker."""
        pass

    @abstractmethod
    async def sign_licence(self, user_id: Union[int, str], licence_type: Union[LicenceType, str]) -> Any:
        """Enregistre l'acceptation d'une licence."""
        pass
