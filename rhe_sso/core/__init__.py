"""
RHE SSO: Core

Configuration du broker et taxonomie d'erreurs partagées par le transport
et le broker de session.
"""

from .interfaces import (
    IConfigLoader,
    BrokerCredentials,
    BrokerConfig,
    TimeoutConfig,
    InvalidTimeoutError,
)
from .config_loader import ConfigLoader, ConfigIntegrityError
from .errors import (
    ErrorKind,
    Result,
    SsoError,
    ApiError,
    MalformedResponseError,
    ValidationError,
    NotAttachedError,
    AuthError,
    AuthTransportError,
)

__all__ = [
    # Interfaces
    "IConfigLoader",
    # Data classes
    "BrokerCredentials",
    "BrokerConfig",
    "TimeoutConfig",
    "Result",
    # Enums
    "ErrorKind",
    # Implementations
    "ConfigLoader",
    # Exceptions
    "SsoError",
    "ApiError",
    "MalformedResponseError",
    "ValidationError",
    "NotAttachedError",
    "AuthError",
    "AuthTransportError",
    "ConfigIntegrityError",
    "InvalidTimeoutError",
]
