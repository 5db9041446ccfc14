"""
RHE SSO - Errors

Taxonomie des erreurs franchissant la frontière de la librairie, et type
résultat utilisé par le transport et le broker pour classifier les réponses.

Toutes les erreurs remontent à l'appelant immédiat: aucune n'est rejouée
automatiquement.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(Enum):
    """Tags de la taxonomie d'erreurs."""

    VALIDATION = "validation"
    NOT_ATTACHED = "not_attached"
    AUTH = "auth"
    AUTH_TRANSPORT = "auth_transport"
    API = "api"


class SsoError(Exception):
    """Erreur de base de la librairie."""

    kind: ErrorKind = ErrorKind.API


class ApiError(SsoError):
    """
    Appel API REST en échec (statut >= 400 hors 422, ou connexion impossible).

    Attributes:
        status_code: Statut HTTP, None si aucune réponse reçue
        body: Corps brut de la réponse
    """

    kind = ErrorKind.API

    def __init__(self, status_code: Optional[int], body: str = "", message: str = "") -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message or f"API call failed with status {status_code}: {body}")


class MalformedResponseError(ApiError):
    """Réponse hors contrat: corps non JSON ou enveloppe sans 'payload'."""

    def __init__(self, status_code: Optional[int], body: str, reason: str) -> None:
        self.reason = reason
        super().__init__(status_code, body, f"Malformed API response ({reason})")


class ValidationError(SsoError):
    """
    Données rejetées par le serveur (HTTP 422).

    Attributes:
        fields: Champ -> liste de messages lisibles
    """

    kind = ErrorKind.VALIDATION

    def __init__(self, fields: Dict[str, List[str]]) -> None:
        self.fields = fields
        super().__init__("Request data sent to the RHE SSO API did not pass validation rules.")

    @property
    def errors(self) -> Dict[str, List[str]]:
        return self.fields


class NotAttachedError(SsoError):
    """
    Aucun token de session utilisable: le flux d'attachement doit être relancé.

    Attributes:
        reason: Motif (message serveur ou absence de token)
        status_code: 403 si signalé par le serveur, None sinon
    """

    kind = ErrorKind.NOT_ATTACHED

    def __init__(self, reason: str = "No token", status_code: Optional[int] = None) -> None:
        self.reason = reason
        self.status_code = status_code
        super().__init__(reason)


class AuthError(SsoError):
    """
    Requête authentifiée rejetée pour un autre motif que la perte de session.

    Attributes:
        message: Message d'erreur fourni par le serveur
        data: Données structurées optionnelles
        status_code: Statut HTTP
    """

    kind = ErrorKind.AUTH

    def __init__(self, message: str, data: Any = None, status_code: Optional[int] = None) -> None:
        self.message = message
        self.data = data
        self.status_code = status_code
        super().__init__(message)

    def get_data(self) -> Any:
        return self.data


class AuthTransportError(SsoError):
    """
    Echec réseau ou de décodage sur l'endpoint d'authentification.

    Attributes:
        cause: Exception d'origine (None pour une erreur de décodage)
    """

    kind = ErrorKind.AUTH_TRANSPORT

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        super().__init__(message)


@dataclass
class Result:
    """
    Résultat d'un appel: payload en cas de succès, erreur typée sinon.

    Example:
        result = await transport.send("GET", "/user-by-email/a@b.com")
        if result.kind is ErrorKind.VALIDATION:
            ...
        user = result.unwrap()
    """

    value: Any = None
    error: Optional[SsoError] = None

    @classmethod
    def success(cls, value: Any) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: SsoError) -> "Result":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Tag de l'erreur, None en cas de succès."""
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> Any:
        """
        Retourne la valeur ou lève l'erreur portée.

        Raises:
            SsoError: L'erreur typée du résultat
        """
        if self.error is not None:
            raise self.error
        return self.value
