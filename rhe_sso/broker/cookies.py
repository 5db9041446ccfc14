"""
RHE SSO: Broker - Cookie Stores

Stockage des cookies de session entre le broker et le framework web hôte.
"""

from email.utils import format_datetime
from http.cookies import SimpleCookie
from typing import Dict, List, Mapping, Optional

from .interfaces import CookieSpec, ICookieStore


class MemoryCookieStore(ICookieStore):
    """
    Stockage en mémoire, alimenté par les cookies de la requête entrante.

    Les écritures sont conservées pour que le framework hôte les émette
    en en-têtes Set-Cookie sur la réponse.

    Example:
        store = MemoryCookieStore(request.cookies)
        broker = SessionBroker(config, cookie_store=store)
        await broker.attach()
        for value in store.header_values():
            response.headers.append("Set-Cookie", value)
    """

    def __init__(self, initial: Optional[Mapping[str, str]] = None) -> None:
        """
        Args:
            initial: Cookies reçus avec la requête entrante
        """
        self._values: Dict[str, str] = dict(initial or {})
        self._pending: List[CookieSpec] = []

    @classmethod
    def from_header(cls, header: str) -> "MemoryCookieStore":
        """
        Construit le store depuis un en-tête Cookie brut.

        Analyse tolérante: un cookie tiers mal formé (JSON, espaces,
        antislash) n'empêche pas la lecture des cookies qui le suivent.
        Préférer le constructeur avec `request.cookies` quand le framework
        hôte a déjà analysé l'en-tête.
        """
        values: Dict[str, str] = {}
        for chunk in (header or "").split(";"):
            name, sep, value = chunk.partition("=")
            name, value = name.strip(), value.strip()
            if not sep or not name:
                continue
            if len(value) >= 2 and value[0] == value[-1] == '"':
                value = value[1:-1]
            values[name] = value
        return cls(values)

    def get(self, name: str) -> Optional[str]:
        value = self._values.get(name)
        return value if value else None

    def set_many(self, cookies: List[CookieSpec]) -> None:
        for cookie in cookies:
            if cookie.is_expired():
                self._values.pop(cookie.name, None)
            else:
                self._values[cookie.name] = cookie.value
        self._pending.extend(cookies)

    def pending(self) -> List[CookieSpec]:
        """Ecritures non encore émises, dans l'ordre."""
        return list(self._pending)

    def header_values(self, flush: bool = True) -> List[str]:
        """
        Rend les écritures en valeurs d'en-tête Set-Cookie.

        Args:
            flush: Vide la file des écritures après rendu

        Returns:
            Une valeur Set-Cookie par écriture
        """
        rendered = [render_set_cookie(cookie) for cookie in self._pending]
        if flush:
            self._pending.clear()
        return rendered


def render_set_cookie(cookie: CookieSpec) -> str:
    """Rend une écriture de cookie en valeur d'en-tête Set-Cookie."""
    jar = SimpleCookie()
    jar[cookie.name] = cookie.value
    morsel = jar[cookie.name]
    morsel["expires"] = format_datetime(cookie.expires, usegmt=True)
    morsel["path"] = cookie.path
    if cookie.domain:
        morsel["domain"] = cookie.domain
    if cookie.secure:
        morsel["secure"] = True
    if cookie.http_only:
        morsel["httponly"] = True
    return morsel.OutputString()
