"""
RHE SSO: Broker

Attachement de la session navigateur à une session du serveur SSO et
exécution des requêtes authentifiées par token.
"""

from .interfaces import (
    # Enums
    BrokerState,
    # Data classes
    RequestContext,
    CookieSpec,
    # Interfaces
    ICookieStore,
    ISessionBroker,
)
from .cookies import MemoryCookieStore, render_set_cookie
from .session_broker import SessionBroker

__all__ = [
    # Enums
    "BrokerState",
    # Data classes
    "RequestContext",
    "CookieSpec",
    # Interfaces
    "ICookieStore",
    "ISessionBroker",
    # Implementations
    "MemoryCookieStore",
    "SessionBroker",
    "render_set_cookie",
]
