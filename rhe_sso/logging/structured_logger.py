"""
RHE SSO: Logging - Structured Logger

Logger JSON du transport et du broker. Un logger par broker (donc par
requête entrante) partage un correlation_id unique sur toutes ses lignes.
Journaliser n'altère jamais le flot de contrôle.
"""

import uuid
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Deque, List, Optional

from .interfaces import IStructuredLogger, LogConfig, LogEntry, LogLevel
from .sensitive_masker import SensitiveMasker


class MissingRequiredFieldError(Exception):
    """Entrée émise sans broker associé."""

    def __init__(self, field_name: str) -> None:
        self.field_name = field_name
        super().__init__(f"Required field missing: {field_name}")


class StructuredLogger(IStructuredLogger):
    """
    Logger JSON structuré.

    Example:
        logger = StructuredLogger("rhe_sso.broker", output_handler=print)
        logger.bind_broker("my-broker")
        logger.warn("SSO session lost", command="userInfo", status_code=403)
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        output_handler: Optional[Callable[[str], None]] = None,
        correlation_id: Optional[str] = None,
        masker: Optional[SensitiveMasker] = None,
    ) -> None:
        """
        Args:
            name: Nom du logger (ex: rhe_sso.api)
            config: Niveau minimal et taille du tampon
            output_handler: Destination des lignes JSON
            correlation_id: Identifiant partagé par toutes les entrées (généré si absent)
            masker: Masquage des données jointes

        Raises:
            ValueError: Si name vide
        """
        if not name or not name.strip():
            raise ValueError("Logger name cannot be empty")

        self._name = name.strip()
        self._config = config or LogConfig()
        self._output_handler = output_handler
        self._correlation_id = correlation_id or uuid.uuid4().hex
        self._masker = masker or SensitiveMasker()
        self._broker_id: Optional[str] = None
        self._entries: Deque[LogEntry] = deque(maxlen=self._config.max_entries)

    @property
    def name(self) -> str:
        return self._name

    @property
    def correlation_id(self) -> str:
        return self._correlation_id

    @property
    def entries(self) -> List[LogEntry]:
        return list(self._entries)

    def bind_broker(self, broker_id: str) -> None:
        self._broker_id = broker_id

    def _emit(self, level: LogLevel, message: str, extra: dict) -> Optional[LogEntry]:
        if level.severity < self._config.min_level.severity:
            return None
        if not self._broker_id:
            raise MissingRequiredFieldError("broker_id")

        now = datetime.now(timezone.utc)
        entry = LogEntry(
            timestamp=now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            level=level,
            logger=self._name,
            correlation_id=self._correlation_id,
            broker_id=self._broker_id,
            message=message,
            extra=self._masker.mask(extra),
        )
        self._entries.append(entry)
        if self._output_handler:
            self._output_handler(entry.to_json())
        return entry

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self._emit(LogLevel.DEBUG, message, extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self._emit(LogLevel.INFO, message, extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self._emit(LogLevel.WARN, message, extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self._emit(LogLevel.ERROR, message, extra)
