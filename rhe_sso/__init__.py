"""
RHE SSO

Client du serveur Single Sign-On RHE pour les applications broker:
    - API REST de gestion des utilisateurs (UserApiClient)
    - Attachement de session navigateur et login SSO (SessionBroker)
"""

from .core import (
    BrokerConfig,
    BrokerCredentials,
    ConfigLoader,
    ErrorKind,
    Result,
    TimeoutConfig,
    SsoError,
    ApiError,
    MalformedResponseError,
    ValidationError,
    NotAttachedError,
    AuthError,
    AuthTransportError,
)
from .api import HttpTransport, LicenceType, UserApiClient
from .broker import BrokerState, MemoryCookieStore, RequestContext, SessionBroker

__version__ = "1.0.0"

__all__ = [
    "BrokerConfig",
    "BrokerCredentials",
    "ConfigLoader",
    "TimeoutConfig",
    "ErrorKind",
    "Result",
    "HttpTransport",
    "LicenceType",
    "UserApiClient",
    "BrokerState",
    "MemoryCookieStore",
    "RequestContext",
    "SessionBroker",
    "SsoError",
    "ApiError",
    "MalformedResponseError",
    "ValidationError",
    "NotAttachedError",
    "AuthError",
    "AuthTransportError",
]
