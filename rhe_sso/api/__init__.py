"""
RHE SSO: API

Client de l'API REST utilisateurs et transport HTTP signé.
"""

from .interfaces import IHttpTransport, IUserApiClient, LicenceType
from .transport import HttpTransport, flatten_form
from .user_client import UserApiClient

__all__ = [
    # Interfaces
    "IHttpTransport",
    "IUserApiClient",
    # Enums
    "LicenceType",
    # Implementations
    "HttpTransport",
    "UserApiClient",
    "flatten_form",
]
