"""
RHE SSO: Logging - Sensitive Masker

Masquage des secrets broker, mots de passe, tokens et checksums dans les
données jointes aux logs.
"""

from typing import Any, FrozenSet, Iterable, Optional

MASK_VALUE = "***MASKED***"

SENSITIVE_PATTERNS: FrozenSet[str] = frozenset(
    {
        "password",
        "secret",
        "token",
        "checksum",
        "authorization",
        "cookie",
        "credential",
    }
)


class SensitiveMasker:
    """
    Remplace la valeur de toute clé sensible, à n'importe quelle profondeur.

    Example:
        SensitiveMasker().mask({"broker": "b", "checksum": "9f86d0"})
        # {"broker": "b", "checksum": "***MASKED***"}
    """

    def __init__(self, extra_patterns: Optional[Iterable[str]] = None) -> None:
        self._patterns = SENSITIVE_PATTERNS | {p.lower() for p in extra_patterns or () if p}

    def is_sensitive_key(self, key: Any) -> bool:
        lowered = str(key).lower()
        return bool(lowered) and any(pattern in lowered for pattern in self._patterns)

    def mask(self, value: Any) -> Any:
        """
        Retourne une copie masquée de value (dict, list, tuple ou scalaire).

        L'objet d'origine n'est jamais modifié.
        """
        if isinstance(value, dict):
            return {
                key: MASK_VALUE if self.is_sensitive_key(key) else self.mask(item)
                for key, item in value.items()
            }
        if isinstance(value, (list, tuple)):
            return [self.mask(item) for item in value]
        return value
