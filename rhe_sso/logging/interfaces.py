"""
RHE SSO: Logging - Interfaces

Une ligne JSON par événement du transport ou du broker.

Invariants:
    - Champs toujours présents: timestamp, level, logger, correlation_id, broker_id, message
    - Timestamp ISO 8601 UTC à la milliseconde
    - Secrets broker, tokens de session et mots de passe jamais en clair
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Niveaux émis par la librairie, du moins au plus sévère."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"

    @property
    def severity(self) -> int:
        return list(LogLevel).index(self)


@dataclass(frozen=True)
class LogEntry:
    """Evénement journalisé, extra déjà masqué."""

    timestamp: str
    level: LogLevel
    logger: str
    correlation_id: str
    broker_id: str
    message: str
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        record: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "level": self.level.value,
            "logger": self.logger,
            "correlation_id": self.correlation_id,
            "broker_id": self.broker_id,
            "message": self.message,
        }
        if self.extra:
            record["extra"] = self.extra
        return json.dumps(record, ensure_ascii=False, default=str)


@dataclass
class LogConfig:
    """
    Attributes:
        min_level: Niveau minimal émis (DEBUG pour tracer chaque requête)
        max_entries: Taille du tampon d'entrées conservées en mémoire
    """

    min_level: LogLevel = LogLevel.INFO
    max_entries: int = 1000


class IStructuredLogger(ABC):
    """Contrat de journalisation attendu par le transport et le broker."""

    @abstractmethod
    def bind_broker(self, broker_id: str) -> None:
        """Associe les entrées suivantes au broker donné."""
        pass

    @abstractmethod
    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        pass

    @abstractmethod
    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        pass

    @abstractmethod
    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        pass

    @abstractmethod
    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        pass

    @property
    @abstractmethod
    def entries(self) -> List[LogEntry]:
        """Entrées conservées, plus anciennes en premier."""
        pass
