"""
RHE SSO: API - User API Client

Opérations de cycle de vie utilisateur exposées par l'API REST du SSO.
Chaque méthode retourne le payload désenveloppé; les erreurs du transport
remontent inchangées.
"""

from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import quote

import httpx

from ..core.interfaces import BrokerCredentials, TimeoutConfig
from ..logging import StructuredLogger
from .interfaces import IHttpTransport, IUserApiClient, LicenceType
from .transport import HttpTransport


def _segment(value: Union[int, str]) -> str:
    return quote(str(value), safe="@")


class UserApiClient(IUserApiClient):
    """
    Client de l'API utilisateurs du SSO.

    Example:
        client = UserApiClient.create("my-broker", "s3cret", "https://dev.sso.rheglobal.com/api")
        if not await client.is_email_registered("a@b.com"):
            user = await client.register({"email": "a@b.com", "password": "secret"})
    """

    def __init__(
        self,
        credentials: BrokerCredentials,
        transport: Optional[IHttpTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeouts: Optional[TimeoutConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ) -> None:
        """
        Args:
            credentials: Identité du broker et URL de base de l'API
            transport: Transport injecté (sinon HttpTransport)
            http_client: Client httpx transmis au HttpTransport créé
            timeouts: Timeouts transmis au HttpTransport créé
            logger: Logger structuré
        """
        self._credentials = credentials
        self._transport = transport or HttpTransport(
            credentials, http_client=http_client, timeouts=timeouts, logger=logger
        )

    @classmethod
    def create(
        cls, broker_id: str, broker_secret: str, base_api_endpoint: str, **kwargs: Any
    ) -> "UserApiClient":
        """Construit un client à partir des paramètres à plat."""
        credentials = BrokerCredentials(
            broker_id=broker_id,
            broker_secret=broker_secret,
            base_endpoint=base_api_endpoint,
        )
        return cls(credentials, **kwargs)

    @property
    def transport(self) -> IHttpTransport:
        return self._transport

    @staticmethod
    def _without_blank_password(user_details: Mapping[str, Any]) -> Dict[str, Any]:
        """Retire un mot de passe vide pour que le serveur le traite comme absent."""
        details = dict(user_details)
        password = details.get("password")
        if "password" in details and (password is None or not str(password).strip()):
            del details["password"]
        return details

    async def is_email_registered(self, email: str) -> bool:
        """
        Vérifie si un utilisateur existe sur le SSO.

        Args:
            email: Adresse email à vérifier

        Returns:
            True si l'utilisateur existe
        """
        return bool(await self._transport.get(f"/check-email-exists/{_segment(email)}"))

    async def register(
        self, user_details: Mapping[str, Any], options: Optional[Mapping[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Crée un compte utilisateur sur le serveur SSO.

        Args:
            user_details: Paramètres de création
            options: Options de comportement, transmises telles quelles au serveur

        Returns:
            Utilisateur enregistré

        Raises:
            ValidationError: Données refusées (HTTP 422)
        """
        form = self._without_blank_password(user_details)
        form["options"] = dict(options or {})
        return await self._transport.post("/users", form)

    async def get_user_by_email(self, email: str) -> Dict[str, Any]:
        return await self._transport.get(f"/user-by-email/{_segment(email)}")

    async def get_user_by_credentials(self, email: str, password: str) -> Dict[str, Any]:
        """
        Récupère un utilisateur par email et mot de passe.

        Permet d'authentifier localement sans session SSO partagée.
        """
        return await self._transport.post(
            "/user-by-credentials", {"email": email, "password": password}
        )

    async def seed_sso_user(self, user_details: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Importe un utilisateur applicatif existant dans la base SSO.

        L'appelant doit conserver l'identifiant SSO retourné pour chaque utilisateur.
        """
        return await self._transport.post("/users/import", dict(user_details))

    async def update_user(self, user_id: Union[int, str], user_details: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Met à jour un utilisateur.

        Le formulaire est transmis tel quel, mot de passe vide compris.

        Raises:
            ValidationError: Données refusées (HTTP 422)
        """
        return await self._transport.put(f"/users/{_segment(user_id)}", dict(user_details))

    async def attach_user(self, user_id: Union[int, str]) -> Any:
        return await self._transport.post(f"/users/{_segment(user_id)}/attach")

    async def detach_user(self, user_id: Union[int, str]) -> Any:
        """
        Détache un utilisateur du service du broker.

        Le serveur supprime l'utilisateur lorsque le dernier service le détache.
        """
        return await self._transport.delete(f"/users/{_segment(user_id)}")

    async def sign_licence(self, user_id: Union[int, str], licence_type: Union[LicenceType, str]) -> Any:
        """
        Enregistre l'acceptation d'une licence par un utilisateur.

        Args:
            user_id: Identifiant SSO de l'utilisateur
            licence_type: Type de licence (LicenceType ou valeur brute)
        """
        value = licence_type.value if isinstance(licence_type, LicenceType) else str(licence_type)
        return await self._transport.post(
            "/sign-licence", {"user_id": user_id, "licence_type": value}
        )

    async def sign_terms_of_service(self, user_id: Union[int, str]) -> Any:
        return await self.sign_licence(user_id, LicenceType.TERMS_OF_SERVICE)

    async def sign_client_licence(self, user_id: Union[int, str]) -> Any:
        return await self.sign_licence(user_id, LicenceType.CLIENT_LICENCE)

    async def sign_eula(self, user_id: Union[int, str]) -> Any:
        return await self.sign_licence(user_id, LicenceType.EULA)

    async def sign_contributions(self, user_id: Union[int, str]) -> Any:
        return await self.sign_licence(user_id, LicenceType.CONTRIBUTIONS)

    async def sign_reasonable_use(self, user_id: Union[int, str]) -> Any:
        return await self.sign_licence(user_id, LicenceType.REASONABLE_USE)
